"""Builds tokenizer, encoder and model dimensions for one pretrained model."""

import logging
import time
from dataclasses import dataclass

from longembed.config import ModelSourceConfig
from longembed.embedding.data_types import ModelSpec
from longembed.errors import ModelLoadError
from longembed.loading.encoder import BertEncoderAdapter
from longembed.loading.hub import fetch_model_files
from longembed.loading.model_config import read_encoder_config
from longembed.loading.tokenizer import HFTokenizerAdapter
from longembed.loading.weights import WeightLoaderFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedModel:
    """Everything the embedding pipeline needs from one pretrained model.

    Attributes:
        tokenizer: Tokenizer adapter with padding and truncation disabled.
        encoder: Encoder adapter.
        spec: Window length and hidden size.
    """

    tokenizer: HFTokenizerAdapter
    encoder: BertEncoderAdapter
    spec: ModelSpec


def load_model(source: ModelSourceConfig) -> LoadedModel:
    """Fetch and build the tokenizer, encoder and dimensions of a model.

    Args:
        source: Which model, revision and weights format to load.

    Returns:
        LoadedModel instance.

    Raises:
        ModelLoadError: If any file cannot be fetched or parsed, or the
                        config lacks max_position_embeddings or hidden_size.
    """
    model_id = source.model_id
    weight_loader = WeightLoaderFactory.create(source.use_pth)
    started_at = time.perf_counter()

    logger.info("Loading model %s@%s (weights=%s)", model_id, source.revision, weight_loader.filename)
    files = fetch_model_files(model_id, weight_loader.filename, revision=source.revision, cache_dir=source.cache_dir)

    try:
        spec, raw_config = read_encoder_config(files.config)
    except (OSError, ValueError) as exc:
        raise ModelLoadError(model_id, f"invalid {files.config.name}: {exc}") from exc

    try:
        tokenizer = HFTokenizerAdapter.from_file(files.tokenizer)
    except Exception as exc:
        raise ModelLoadError(model_id, f"invalid {files.tokenizer.name}: {type(exc).__name__}: {exc}") from exc

    try:
        state_dict = weight_loader.load(files.weights)
        encoder = BertEncoderAdapter.from_state_dict(raw_config, state_dict, device=source.device)
    except Exception as exc:
        raise ModelLoadError(model_id, f"invalid {files.weights.name}: {type(exc).__name__}: {exc}") from exc

    logger.info(
        "Model %s loaded in %.1fs: max_seq_len=%d hidden_size=%d",
        model_id,
        time.perf_counter() - started_at,
        spec.max_seq_len,
        spec.hidden_size,
    )
    return LoadedModel(tokenizer=tokenizer, encoder=encoder, spec=spec)
