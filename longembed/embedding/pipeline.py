"""Main orchestrator for the long-text embedding pipeline.

This module provides the LongTextEmbedder class, which wires together
the chunker, pooler, normalizer and aggregator around an injected
tokenizer and encoder.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from longembed.config import PipelineConfig
from longembed.embedding.aggregator import WeightedChunkAggregator
from longembed.embedding.chunker import TokenChunker, compute_overlap
from longembed.embedding.data_types import Chunk, EmbeddingResult, ModelSpec
from longembed.embedding.pooling import mean_pool, normalize
from longembed.embedding.protocols import EncoderAdapter, TokenizerAdapter
from longembed.errors import EncodeError, InvalidConfigError, LongEmbedError, TokenizeError

logger = logging.getLogger(__name__)


class LongTextEmbedder:
    """Embeds text of any length with an encoder of bounded context.

    This class orchestrates a pipeline that:
    1. Tokenizes the input text (special tokens included, no padding or truncation)
    2. Splits the tokens into overlapping windows of at most max_seq_len tokens
    3. Encodes each window and mean-pools its hidden states
    4. Normalizes each window vector to unit norm
    5. Combines the window vectors with a first-window-weighted mean

    Windows are processed strictly in order because aggregation weights
    depend on window position.

    Args:
        tokenizer: Tokenizer with padding and truncation already disabled.
        encoder: Encoder returning [1, n_tokens, hidden_size] hidden states.
        model_spec: Window length and hidden size of the encoder.
        config: Chunking and aggregation settings. Defaults to PipelineConfig().

    Raises:
        InvalidConfigError: If the resolved overlap is not smaller than max_seq_len.
    """

    def __init__(
        self,
        tokenizer: TokenizerAdapter,
        encoder: EncoderAdapter,
        model_spec: ModelSpec,
        config: PipelineConfig | None = None,
    ) -> None:
        self.tokenizer = tokenizer
        self.encoder = encoder
        self.model_spec = model_spec
        self.config = config if config is not None else PipelineConfig()

        if model_spec.hidden_size <= 0:
            raise InvalidConfigError(f"hidden_size must be > 0, got {model_spec.hidden_size}")

        if self.config.overlap is not None:
            overlap = self.config.overlap
        else:
            overlap = compute_overlap(model_spec.max_seq_len, self.config.overlap_divisor)

        # Initialize pipeline components
        self.chunker = TokenChunker(max_seq_len=model_spec.max_seq_len, overlap=overlap)
        self.aggregator = WeightedChunkAggregator(
            first_weight=self.config.first_chunk_weight,
            weight=self.config.chunk_weight,
            normalize_output=self.config.normalize_output,
        )

        logger.info(
            "Embedder ready: max_seq_len=%d hidden_size=%d overlap=%d weights=(%.2f, %.2f) normalize_output=%s",
            model_spec.max_seq_len,
            model_spec.hidden_size,
            overlap,
            self.aggregator.first_weight,
            self.aggregator.weight,
            self.aggregator.normalize_output,
        )

    @property
    def max_input_len(self) -> int:
        """Maximum tokens per encoder window."""
        return self.model_spec.max_seq_len

    @property
    def hidden_size(self) -> int:
        """Length of the produced embedding vectors."""
        return self.model_spec.hidden_size

    def predict(self, text: str) -> NDArray[np.float32]:
        """Embed text into a single vector.

        Args:
            text: Input text of any length.

        Returns:
            float32 array of shape [hidden_size], or shape [0] if the text produced no tokens.

        Raises:
            TokenizeError: If the tokenizer rejects the text.
            InvalidConfigError: If the text needs more than max_chunks windows.
            EncodeError: If the encoder fails or returns a malformed tensor.
            DegenerateVectorError: If a window's pooled vector has zero norm.
        """
        return self.embed(text).vector

    def embed(self, text: str) -> EmbeddingResult:
        """Embed text and keep the per-window detail.

        Same pipeline as predict(), but also returns the windows and their
        unit-norm vectors. Useful for debugging and visualization.

        Args:
            text: Input text of any length.

        Returns:
            EmbeddingResult with the aggregate vector, window vectors and windows.
        """
        tokens = self._tokenize(text)
        n_tokens = len(tokens)

        max_chunks = self.config.max_chunks
        if max_chunks is not None:
            n_chunks = self.chunker.count(n_tokens)
            if n_chunks > max_chunks:
                raise InvalidConfigError(
                    f"Input needs {n_chunks} windows ({n_tokens} tokens), exceeding max_chunks={max_chunks}"
                )

        chunks = self.chunker.chunk(tokens)
        if not chunks:
            logger.warning("Tokenizer produced no tokens, returning empty embedding")

        logger.debug("Split %d tokens into %d window(s)", n_tokens, len(chunks))

        chunk_vectors: list[NDArray[np.float32]] = []
        for index, chunk in enumerate(chunks):
            chunk_vectors.append(self._embed_chunk(index, chunk))

        vector = self.aggregator.aggregate(chunk_vectors)

        if chunk_vectors:
            matrix = np.stack(chunk_vectors).astype(np.float32)
        else:
            matrix = np.empty((0, self.hidden_size), dtype=np.float32)

        return EmbeddingResult(vector=vector, chunk_vectors=matrix, chunks=chunks, num_tokens=n_tokens)

    def _tokenize(self, text: str) -> list[int]:
        """Tokenize text, wrapping adapter failures in TokenizeError."""
        try:
            return list(self.tokenizer.encode(text, add_special_tokens=True))
        except LongEmbedError:
            raise
        except Exception as exc:
            raise TokenizeError(f"Tokenizer rejected input: {type(exc).__name__}: {exc}") from exc

    def _embed_chunk(self, index: int, chunk: Chunk) -> NDArray[np.float32]:
        """Encode, pool and normalize one window.

        Args:
            index: Position of the window in the ordered window list.
            chunk: The window to embed.

        Returns:
            Unit-norm float32 array of shape [hidden_size].
        """
        token_ids = np.asarray(chunk.token_ids, dtype=np.int64)[None, :]
        token_type_ids = np.zeros_like(token_ids)

        try:
            hidden_states = self.encoder.forward(token_ids, token_type_ids)
        except LongEmbedError:
            raise
        except Exception as exc:
            raise EncodeError(f"Encoder failed on window {index}: {type(exc).__name__}: {exc}") from exc

        hidden = np.asarray(hidden_states)
        expected = (1, chunk.length, self.hidden_size)
        if hidden.shape != expected:
            raise EncodeError(f"Encoder returned shape {hidden.shape} for window {index}, expected {expected}")

        pooled = mean_pool(hidden)
        vector = normalize(pooled, chunk_index=index)

        logger.debug("Window %d: tokens [%d, %d) pooled", index, chunk.start, chunk.end)
        return vector
