"""Chunking, pooling and aggregation for long-text embeddings."""

from longembed.embedding.aggregator import WeightedChunkAggregator
from longembed.embedding.chunker import TokenChunker, chunk_tokens, compute_overlap
from longembed.embedding.data_types import Chunk, EmbeddingResult, ModelSpec
from longembed.embedding.pipeline import LongTextEmbedder
from longembed.embedding.pooling import mean_pool, normalize

__all__ = [
    "Chunk",
    "EmbeddingResult",
    "LongTextEmbedder",
    "ModelSpec",
    "TokenChunker",
    "WeightedChunkAggregator",
    "chunk_tokens",
    "compute_overlap",
    "mean_pool",
    "normalize",
]
