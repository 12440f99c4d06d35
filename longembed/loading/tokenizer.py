"""Tokenizer adapter backed by the tokenizers library."""

from pathlib import Path

from tokenizers import Tokenizer

from longembed.errors import TokenizeError


class HFTokenizerAdapter:
    """Tokenizes text into ids with padding and truncation disabled.

    Padding and truncation are switched off once, here, and never touched
    again, so one instance can be shared by concurrent callers.

    Args:
        tokenizer: A tokenizers.Tokenizer. It is reconfigured in place.

    Example:
        >>> adapter = HFTokenizerAdapter.from_file("tokenizer.json")
        >>> adapter.encode("Hello world")
        [101, 7592, 2088, 102]
    """

    def __init__(self, tokenizer: Tokenizer) -> None:
        tokenizer.no_padding()
        tokenizer.no_truncation()
        self._tokenizer = tokenizer

    @classmethod
    def from_file(cls, path: str | Path) -> "HFTokenizerAdapter":
        """Load a tokenizer from a tokenizer.json file."""
        return cls(Tokenizer.from_file(str(path)))

    def encode(self, text: str, add_special_tokens: bool = True) -> list[int]:
        """Convert text to token ids.

        Args:
            text: Raw input text.
            add_special_tokens: Insert the model's special tokens (e.g. [CLS], [SEP]).

        Returns:
            List of token ids. Never padded or truncated.

        Raises:
            TokenizeError: If the tokenizer rejects the input.
        """
        try:
            encoding = self._tokenizer.encode(text, add_special_tokens=add_special_tokens)
        except Exception as exc:
            raise TokenizeError(f"Tokenizer rejected input: {type(exc).__name__}: {exc}") from exc
        return list(encoding.ids)
