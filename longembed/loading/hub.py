"""Fetching model files from the Hugging Face hub or a local directory."""

import logging
from dataclasses import dataclass
from pathlib import Path

from huggingface_hub import hf_hub_download

from longembed.errors import ModelLoadError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
TOKENIZER_FILENAME = "tokenizer.json"


@dataclass(frozen=True)
class ModelFiles:
    """Local paths of the files needed to build one model.

    Attributes:
        config: Path to config.json.
        tokenizer: Path to tokenizer.json.
        weights: Path to the weights file (pytorch_model.bin or model.safetensors).
    """

    config: Path
    tokenizer: Path
    weights: Path


def fetch_model_file(model_id: str, filename: str, revision: str = "main", cache_dir: str | None = None) -> Path:
    """Resolve one model file to a local path, downloading it if needed.

    If model_id is an existing directory the file is taken from there and
    nothing is downloaded.

    Args:
        model_id: Hub repository id, or a local directory.
        filename: File name inside the repository.
        revision: Branch, tag or commit.
        cache_dir: Download cache directory (None = hub default).

    Returns:
        Local path of the file.

    Raises:
        ModelLoadError: If the file cannot be found or downloaded.
    """
    local_dir = Path(model_id)
    if local_dir.is_dir():
        path = local_dir / filename
        if not path.is_file():
            raise ModelLoadError(model_id, f"{filename} not found in {local_dir}")
        return path

    logger.info("Fetching %s from %s@%s", filename, model_id, revision)
    try:
        downloaded = hf_hub_download(repo_id=model_id, filename=filename, revision=revision, cache_dir=cache_dir)
    except Exception as exc:
        raise ModelLoadError(model_id, f"could not fetch {filename}@{revision}: {type(exc).__name__}: {exc}") from exc
    return Path(downloaded)


def fetch_model_files(
    model_id: str,
    weights_filename: str,
    revision: str = "main",
    cache_dir: str | None = None,
) -> ModelFiles:
    """Resolve config, tokenizer and weights files for a model.

    Args:
        model_id: Hub repository id, or a local directory.
        weights_filename: Name of the weights file to fetch.
        revision: Branch, tag or commit.
        cache_dir: Download cache directory (None = hub default).

    Returns:
        ModelFiles with local paths.

    Raises:
        ModelLoadError: If any file cannot be fetched.
    """
    return ModelFiles(
        config=fetch_model_file(model_id, CONFIG_FILENAME, revision, cache_dir),
        tokenizer=fetch_model_file(model_id, TOKENIZER_FILENAME, revision, cache_dir),
        weights=fetch_model_file(model_id, weights_filename, revision, cache_dir),
    )
