"""Parsing of the encoder's config.json."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from longembed.embedding.data_types import ModelSpec


class EncoderConfigFile(BaseModel):
    """The fields of config.json the pipeline depends on.

    Every other key is kept and passed through to the encoder config.
    """

    max_position_embeddings: int = Field(..., gt=0, description="Maximum tokens per encoder window")
    hidden_size: int = Field(..., gt=0, description="Per-token hidden state size")

    model_config = ConfigDict(frozen=True, extra="allow")


def read_encoder_config(path: Path) -> tuple[ModelSpec, dict[str, Any]]:
    """Read config.json into a ModelSpec plus the raw key/value mapping.

    Args:
        path: Path to config.json.

    Returns:
        Tuple of (model_spec, raw_config).

    Raises:
        ValueError: If the file is not a JSON object or required fields are missing.
        OSError: If the file cannot be read.
    """
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"{path.name} must contain a JSON object, got {type(raw).__name__}")

    try:
        parsed = EncoderConfigFile.model_validate(raw)
    except ValidationError as e:
        error_messages = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
        raise ValueError(f"{path.name} validation failed: {error_messages}") from e

    spec = ModelSpec(max_seq_len=parsed.max_position_embeddings, hidden_size=parsed.hidden_size)
    return spec, raw
