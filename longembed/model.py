"""Public model handle: load once, embed many texts."""

import logging

import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from longembed.config import Config, ModelSourceConfig, PipelineConfig, format_validation_error
from longembed.embedding.data_types import EmbeddingResult
from longembed.embedding.pipeline import LongTextEmbedder
from longembed.errors import ModelLoadError
from longembed.loading.loader import load_model

logger = logging.getLogger(__name__)


class EmbeddingModel:
    """A loaded pretrained encoder plus the long-text embedding pipeline.

    Creating a model fetches and loads weights, which is expensive. Create it
    once and reuse it for many predict() calls. Calls do not share any state.

    Args:
        embedder: Configured LongTextEmbedder.
        model_id: Identifier the model was loaded from.

    Example:
        >>> model = EmbeddingModel.create("sentence-transformers/all-MiniLM-L6-v2")
        >>> model.get_hidden_size()
        384
        >>> model.predict("A very long document ...").shape
        (384,)
    """

    def __init__(self, embedder: LongTextEmbedder, model_id: str) -> None:
        self.embedder = embedder
        self.model_id = model_id

    @classmethod
    def create(
        cls,
        model_id: str,
        revision: str = "main",
        use_pth: bool = False,
        *,
        cache_dir: str | None = None,
        device: str = "cpu",
        pipeline: PipelineConfig | None = None,
    ) -> "EmbeddingModel":
        """Load a pretrained model.

        Args:
            model_id: Hub repository id, or a local directory with the model files.
            revision: Branch, tag or commit.
            use_pth: Load pytorch_model.bin instead of model.safetensors.
            cache_dir: Download cache directory (None = hub default).
            device: torch device the encoder runs on.
            pipeline: Chunking and aggregation settings (None = defaults).

        Returns:
            EmbeddingModel instance.

        Raises:
            ModelLoadError: If the model source is invalid or any model file cannot be fetched or parsed.
            InvalidConfigError: If the pipeline settings do not fit the model.
        """
        try:
            source = ModelSourceConfig(
                model_id=model_id,
                revision=revision,
                use_pth=use_pth,
                cache_dir=cache_dir,
                device=device,
            )
        except ValidationError as e:
            raise ModelLoadError(model_id, f"invalid model source: {format_validation_error(e)}") from e
        return cls.from_source(source, pipeline)

    @classmethod
    def from_source(cls, source: ModelSourceConfig, pipeline: PipelineConfig | None = None) -> "EmbeddingModel":
        """Load a pretrained model described by a ModelSourceConfig."""
        loaded = load_model(source)
        embedder = LongTextEmbedder(
            tokenizer=loaded.tokenizer,
            encoder=loaded.encoder,
            model_spec=loaded.spec,
            config=pipeline,
        )
        return cls(embedder, model_id=source.model_id)

    @classmethod
    def from_config(cls, config: Config) -> "EmbeddingModel":
        """Load the model and pipeline settings described by a config file."""
        return cls.from_source(config.get_model_config(), config.get_pipeline_config())

    def get_max_input_len(self) -> int:
        """Get maximum input length in tokens of one encoder window."""
        return self.embedder.max_input_len

    def get_hidden_size(self) -> int:
        """Get the size of the produced embedding vectors."""
        return self.embedder.hidden_size

    def predict(self, text: str) -> NDArray[np.float32]:
        """Embed text of any length into a float32 vector of length get_hidden_size()."""
        return self.embedder.predict(text)

    def embed(self, text: str) -> EmbeddingResult:
        """Embed text and return the per-window detail as well."""
        return self.embedder.embed(text)
