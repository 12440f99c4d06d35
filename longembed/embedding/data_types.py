"""Data types for the long-text embedding pipeline.

All dataclasses used to pass data between pipeline stages are defined here.
This keeps type definitions in one place and avoids circular imports.

Note: "token" in this module refers to integer subword ids produced by the
model tokenizer, including any special tokens it inserts.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class ModelSpec:
    """Dimensions of one loaded encoder.

    Attributes:
        max_seq_len: Maximum number of tokens the encoder accepts in one window.
                     Taken from the model's max_position_embeddings.
        hidden_size: Length of every per-token hidden state and of the output vector.
    """

    max_seq_len: int
    hidden_size: int


@dataclass(frozen=True)
class Chunk:
    """A contiguous window of the token sequence.

    Attributes:
        start: Offset of the first token of this window in the full sequence.
        token_ids: The token ids in this window, copied out of the sequence.
    """

    start: int
    token_ids: tuple[int, ...]

    @property
    def length(self) -> int:
        """Number of tokens in this window."""
        return len(self.token_ids)

    @property
    def end(self) -> int:
        """Offset one past the last token of this window (exclusive)."""
        return self.start + len(self.token_ids)


@dataclass
class EmbeddingResult:
    """Output of the LongTextEmbedder for one input text.

    Attributes:
        vector: Aggregated document embedding of shape [hidden_size],
                or shape [0] when the text produced no tokens.
        chunk_vectors: numpy array of shape [n_chunks, hidden_size].
                       Each row is the unit-norm embedding of one window, in order.
        chunks: The windows the token sequence was split into, in order.
        num_tokens: Total number of tokens produced by the tokenizer.
    """

    vector: NDArray[np.float32]
    chunk_vectors: NDArray[np.float32]
    chunks: list[Chunk]
    num_tokens: int

    @property
    def num_chunks(self) -> int:
        """Number of windows that were encoded."""
        return len(self.chunks)
