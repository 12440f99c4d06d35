"""Protocols for the collaborators the embedding pipeline depends on."""

from typing import Protocol

import numpy as np
from numpy.typing import NDArray


class TokenizerAdapter(Protocol):
    """Protocol for turning text into token ids."""

    def encode(self, text: str, add_special_tokens: bool = True) -> list[int]:
        """Tokenize text without padding or truncation."""
        ...


class EncoderAdapter(Protocol):
    """Protocol for a bounded-context transformer encoder."""

    def forward(self, token_ids: NDArray[np.int64], token_type_ids: NDArray[np.int64]) -> NDArray[np.floating]:
        """Encode one window.

        Args:
            token_ids: Array of shape [1, n_tokens].
            token_type_ids: Array of shape [1, n_tokens].

        Returns:
            Hidden states of shape [1, n_tokens, hidden_size].
        """
        ...
