"""Pooling and normalization of per-window hidden states."""

import numpy as np
from numpy.typing import NDArray

from longembed.errors import DegenerateVectorError, EncodeError


def mean_pool(hidden_states: NDArray[np.floating]) -> NDArray[np.float32]:
    """Average a window's hidden states over the token axis.

    Every token contributes equally, special tokens included. No attention
    mask is applied.

    Args:
        hidden_states: Array of shape [1, n_tokens, hidden_size].

    Returns:
        Array of shape [hidden_size].

    Raises:
        EncodeError: If the array is not [1, n_tokens, hidden_size] with n_tokens > 0.
    """
    hidden = np.asarray(hidden_states, dtype=np.float32)
    if hidden.ndim != 3 or hidden.shape[0] != 1:
        raise EncodeError(f"Expected hidden states of shape [1, n_tokens, hidden_size], got {hidden.shape}")

    n_tokens = hidden.shape[1]
    if n_tokens == 0:
        raise EncodeError("Cannot pool hidden states of an empty window")

    pooled: NDArray[np.float32] = hidden.sum(axis=1)[0] / np.float32(n_tokens)
    return pooled


def normalize(vector: NDArray[np.floating], chunk_index: int | None = None) -> NDArray[np.float32]:
    """Scale a vector to unit Euclidean norm.

    Args:
        vector: 1-D array.
        chunk_index: Window position, only used in the error message.

    Returns:
        New float32 array with norm ~1.

    Raises:
        DegenerateVectorError: If the norm is zero or not finite.
    """
    # float64 keeps the squared sum finite and nonzero for any finite float32 input
    v = np.asarray(vector, dtype=np.float64)
    length = float(np.linalg.norm(v))
    if length == 0.0 or not np.isfinite(length):
        raise DegenerateVectorError(norm=length, chunk_index=chunk_index)

    normalized: NDArray[np.float32] = (v / length).astype(np.float32)
    return normalized
