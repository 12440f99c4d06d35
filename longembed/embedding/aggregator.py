"""Aggregator for the long-text embedding pipeline.

Combines the ordered per-window vectors into one document vector with a
weighted mean that favours the opening window.
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from longembed.constants import DEFAULT_CHUNK_WEIGHT, DEFAULT_FIRST_CHUNK_WEIGHT, DEFAULT_NORMALIZE_OUTPUT
from longembed.errors import DegenerateVectorError, InvalidConfigError


class WeightedChunkAggregator:
    """Weighted mean of chunk vectors, position-weighted.

    The first window gets first_weight, every other window gets weight.
    The result is a mean of unit vectors, so its norm is <= 1 and is only 1
    when all windows point the same way. Set normalize_output to rescale it
    to unit norm.

    Args:
        first_weight: Weight of the first window.
        weight: Weight of every later window.
        normalize_output: Rescale the aggregate to unit norm.

    Example:
        >>> agg = WeightedChunkAggregator()
        >>> agg.aggregate([np.ones(2, dtype=np.float32), np.zeros(2, dtype=np.float32)])
        array([0.54545456, 0.54545456], dtype=float32)
    """

    def __init__(
        self,
        first_weight: float = DEFAULT_FIRST_CHUNK_WEIGHT,
        weight: float = DEFAULT_CHUNK_WEIGHT,
        normalize_output: bool = DEFAULT_NORMALIZE_OUTPUT,
    ) -> None:
        if first_weight <= 0 or weight <= 0:
            raise InvalidConfigError(f"Chunk weights must be > 0, got first_weight={first_weight}, weight={weight}")
        self.first_weight = first_weight
        self.weight = weight
        self.normalize_output = normalize_output

    def weights(self, n_chunks: int) -> NDArray[np.float64]:
        """Return the weight of each of n_chunks windows, in order."""
        weights = np.full(n_chunks, self.weight, dtype=np.float64)
        if n_chunks > 0:
            weights[0] = self.first_weight
        return weights

    def aggregate(self, chunk_vectors: Sequence[NDArray[np.floating]] | NDArray[np.floating]) -> NDArray[np.float32]:
        """Combine chunk vectors into one vector.

        Args:
            chunk_vectors: Ordered vectors, all of the same length.

        Returns:
            float32 array of the same length, or an empty array if no vectors were given.

        Raises:
            ValueError: If the vectors have different lengths.
            DegenerateVectorError: If normalize_output is set and the aggregate is zero.
        """
        if len(chunk_vectors) == 0:
            return np.empty(0, dtype=np.float32)

        # float64 accumulation so a single chunk comes back bit-for-bit
        matrix = np.asarray(np.stack([np.asarray(v) for v in chunk_vectors]), dtype=np.float64)
        weights = self.weights(matrix.shape[0])
        weight_sum = float(weights.sum())

        result = (weights[:, None] * matrix).sum(axis=0) / weight_sum

        if self.normalize_output:
            length = float(np.linalg.norm(result))
            if length == 0.0 or not np.isfinite(length):
                raise DegenerateVectorError(norm=length)
            result = result / length

        return result.astype(np.float32)
