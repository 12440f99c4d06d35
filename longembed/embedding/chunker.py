"""Token chunker for the long-text embedding pipeline.

Splits a token sequence into overlapping windows no longer than the
encoder's maximum input length.
"""

from collections.abc import Sequence

from longembed.constants import DEFAULT_OVERLAP_DIVISOR
from longembed.embedding.data_types import Chunk
from longembed.errors import InvalidConfigError


def compute_overlap(max_seq_len: int, divisor: int = DEFAULT_OVERLAP_DIVISOR) -> int:
    """Derive the window overlap from the window length.

    Args:
        max_seq_len: Maximum tokens per window.
        divisor: The overlap is max_seq_len // divisor.

    Returns:
        Number of tokens shared by consecutive windows.

    Raises:
        InvalidConfigError: If divisor is not positive.
    """
    if divisor <= 0:
        raise InvalidConfigError(f"overlap divisor must be > 0, got {divisor}")
    return max_seq_len // divisor


def validate_chunking(max_seq_len: int, overlap: int) -> None:
    """Check that chunking with these parameters makes forward progress.

    Raises:
        InvalidConfigError: If max_seq_len <= 0, overlap < 0 or overlap >= max_seq_len.
    """
    if max_seq_len <= 0:
        raise InvalidConfigError(f"max_seq_len must be > 0, got {max_seq_len}")
    if overlap < 0:
        raise InvalidConfigError(f"overlap must be >= 0, got {overlap}")
    if overlap >= max_seq_len:
        raise InvalidConfigError(f"overlap ({overlap}) must be smaller than max_seq_len ({max_seq_len})")


def chunk_tokens(tokens: Sequence[int], max_seq_len: int, overlap: int) -> list[Chunk]:
    """Split tokens into ordered, overlapping windows covering the whole sequence.

    Windows start at 0 and advance by max_seq_len - overlap until a window
    reaches the end of the sequence. The last window may be shorter than
    max_seq_len. A sequence of at most max_seq_len tokens is one window.

    Args:
        tokens: Token ids to split.
        max_seq_len: Maximum tokens per window.
        overlap: Tokens shared by consecutive windows.

    Returns:
        List of Chunk objects in sequence order. Empty if tokens is empty.

    Raises:
        InvalidConfigError: If the parameters would never terminate.

    Example:
        >>> [(c.start, c.end) for c in chunk_tokens(list(range(25)), 10, 1)]
        [(0, 10), (9, 19), (18, 25)]
    """
    validate_chunking(max_seq_len, overlap)

    step = max_seq_len - overlap
    n_tokens = len(tokens)
    chunks: list[Chunk] = []

    start = 0
    while start < n_tokens:
        end = min(start + max_seq_len, n_tokens)
        chunks.append(Chunk(start=start, token_ids=tuple(tokens[start:end])))
        # A window starting past here would lie entirely inside this one
        if end == n_tokens:
            break
        start += step

    return chunks


class TokenChunker:
    """Splits token sequences into windows with fixed, pre-validated parameters.

    Args:
        max_seq_len: Maximum tokens per window.
        overlap: Tokens shared by consecutive windows.

    Raises:
        InvalidConfigError: If the parameters are invalid. Raised at construction,
                            before any sequence is chunked.
    """

    def __init__(self, max_seq_len: int, overlap: int) -> None:
        validate_chunking(max_seq_len, overlap)
        self.max_seq_len = max_seq_len
        self.overlap = overlap

    @property
    def step(self) -> int:
        """Number of tokens between the starts of consecutive windows."""
        return self.max_seq_len - self.overlap

    def count(self, n_tokens: int) -> int:
        """Number of windows chunk() would produce for n_tokens tokens."""
        if n_tokens <= 0:
            return 0
        if n_tokens <= self.max_seq_len:
            return 1
        return -(-(n_tokens - self.max_seq_len) // self.step) + 1

    def chunk(self, tokens: Sequence[int]) -> list[Chunk]:
        """Split tokens into windows. See chunk_tokens()."""
        return chunk_tokens(tokens, self.max_seq_len, self.overlap)
