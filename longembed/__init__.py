"""Fixed-size embeddings for text of any length with bounded-context encoders."""

from longembed.config import Config, LoggingConfig, ModelSourceConfig, PipelineConfig
from longembed.embedding import EmbeddingResult, LongTextEmbedder, ModelSpec
from longembed.errors import (
    DegenerateVectorError,
    EncodeError,
    InvalidConfigError,
    LongEmbedError,
    ModelLoadError,
    TokenizeError,
)
from longembed.model import EmbeddingModel

__all__ = [
    "Config",
    "DegenerateVectorError",
    "EmbeddingModel",
    "EmbeddingResult",
    "EncodeError",
    "InvalidConfigError",
    "LoggingConfig",
    "LongEmbedError",
    "LongTextEmbedder",
    "ModelLoadError",
    "ModelSourceConfig",
    "ModelSpec",
    "PipelineConfig",
    "TokenizeError",
]
