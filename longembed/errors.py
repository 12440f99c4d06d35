"""Error taxonomy for model loading and embedding."""


class LongEmbedError(Exception):
    """Base class for all errors raised by longembed."""


class ModelLoadError(LongEmbedError):
    """Raised when configuration, tokenizer or weights cannot be fetched or parsed."""

    def __init__(self, model_id: str, reason: str) -> None:
        """Initialize the exception.

        Args:
            model_id: Identifier of the model that failed to load.
            reason: Human readable description of the failure.
        """
        self.model_id = model_id
        self.reason = reason
        super().__init__(f"Failed to load model '{model_id}': {reason}")


class TokenizeError(LongEmbedError):
    """Raised when the tokenizer rejects the input text."""


class InvalidConfigError(LongEmbedError, ValueError):
    """Raised when chunking or pipeline parameters are invalid."""


class DegenerateVectorError(LongEmbedError, ArithmeticError):
    """Raised when a pooled chunk vector has zero (or non-finite) norm."""

    def __init__(self, norm: float, chunk_index: int | None = None) -> None:
        """Initialize the exception.

        Args:
            norm: The offending Euclidean norm.
            chunk_index: Position of the chunk in the ordered chunk list, if known.
        """
        self.norm = norm
        self.chunk_index = chunk_index
        where = f" for chunk {chunk_index}" if chunk_index is not None else ""
        super().__init__(f"Cannot normalize vector with norm {norm}{where}")


class EncodeError(LongEmbedError):
    """Raised when the encoder fails or returns a tensor of the wrong shape."""
