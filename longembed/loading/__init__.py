"""Loading of pretrained tokenizers and encoders."""

from longembed.loading.encoder import BertEncoderAdapter
from longembed.loading.hub import ModelFiles, fetch_model_file, fetch_model_files
from longembed.loading.loader import LoadedModel, load_model
from longembed.loading.model_config import read_encoder_config
from longembed.loading.tokenizer import HFTokenizerAdapter
from longembed.loading.weights import (
    PickleWeightLoader,
    SafetensorsWeightLoader,
    WeightLoader,
    WeightLoaderFactory,
)

__all__ = [
    "BertEncoderAdapter",
    "HFTokenizerAdapter",
    "LoadedModel",
    "ModelFiles",
    "PickleWeightLoader",
    "SafetensorsWeightLoader",
    "WeightLoader",
    "WeightLoaderFactory",
    "fetch_model_file",
    "fetch_model_files",
    "load_model",
    "read_encoder_config",
]
