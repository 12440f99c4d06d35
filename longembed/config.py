"""Configuration loader for longembed."""

from pathlib import Path
from typing import Any, Literal, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from longembed.constants import (
    DEFAULT_CHUNK_WEIGHT,
    DEFAULT_FIRST_CHUNK_WEIGHT,
    DEFAULT_NORMALIZE_OUTPUT,
    DEFAULT_OVERLAP_DIVISOR,
)


class ModelSourceConfig(BaseModel):
    """Configuration for where to load the pretrained encoder from."""

    model_id: str = Field(..., description="Model repository id on the Hugging Face hub", min_length=1)
    revision: str = Field("main", description="Branch, tag or commit of the model repository", min_length=1)
    use_pth: bool = Field(False, description="Load pytorch_model.bin instead of model.safetensors")
    cache_dir: str | None = Field(None, description="Download cache directory (None = hub default)")
    device: str = Field("cpu", description="torch device the encoder runs on")

    model_config = ConfigDict(frozen=True, extra="forbid")


class PipelineConfig(BaseModel):
    """Configuration for chunking and aggregation."""

    overlap_divisor: int = Field(
        DEFAULT_OVERLAP_DIVISOR, gt=0, description="Window overlap is max_seq_len // overlap_divisor"
    )
    overlap: int | None = Field(None, ge=0, description="Explicit window overlap in tokens, overrides overlap_divisor")
    first_chunk_weight: float = Field(DEFAULT_FIRST_CHUNK_WEIGHT, gt=0, description="Aggregation weight of the first window")
    chunk_weight: float = Field(DEFAULT_CHUNK_WEIGHT, gt=0, description="Aggregation weight of every later window")
    normalize_output: bool = Field(DEFAULT_NORMALIZE_OUTPUT, description="Rescale the aggregated vector to unit norm")
    max_chunks: int | None = Field(None, gt=0, description="Maximum windows per input text (None = unbounded)")

    model_config = ConfigDict(frozen=True, extra="forbid")


class LoggingConfig(BaseModel):
    """Configuration for log output of the command line tool."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Root log level")

    model_config = ConfigDict(frozen=True, extra="forbid")


T = TypeVar("T", bound=BaseModel)


def format_validation_error(error: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in error.errors())


class Config:
    """Configuration class that loads and provides access to config.yaml."""

    def __init__(self, config_path: str | Path) -> None:
        """Initialize the Config by loading the YAML file.

        Args:
            config_path: Path to the config.yaml file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If the required 'model' section is missing.
            ValueError: If any section is invalid.
        """
        self.config_path = Path(config_path)
        self._data = self._load(self.config_path)

        self._model = self._validate_section("model", ModelSourceConfig, required=True)
        self._pipeline = self._validate_section("pipeline", PipelineConfig, required=False)
        self._logging = self._validate_section("logging", LoggingConfig, required=False)

    @staticmethod
    def _load(config_path: Path) -> dict[str, Any]:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        # Handle empty or None YAML files
        if data is None:
            raise KeyError("Missing required key 'model' in config file")
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping, got {type(data).__name__}")
        return data

    def _validate_section(self, key: str, model: type[T], *, required: bool) -> T:
        """Validate one top-level section with its pydantic model.

        Raises:
            KeyError: If a required section is missing.
            ValueError: If the section fails validation.
        """
        if key not in self._data:
            if required:
                raise KeyError(f"Missing required key '{key}' in config file")
            return model.model_validate({})

        try:
            return model.model_validate(self._data[key] or {})
        except ValidationError as e:
            raise ValueError(f"{key.capitalize()} configuration validation failed: {format_validation_error(e)}") from e

    def get_model_config(self) -> ModelSourceConfig:
        """Get the model source configuration."""
        return self._model

    def get_pipeline_config(self) -> PipelineConfig:
        """Get the chunking and aggregation configuration (defaults if not configured)."""
        return self._pipeline

    def get_logging_config(self) -> LoggingConfig:
        """Get the logging configuration (defaults if not configured)."""
        return self._logging
