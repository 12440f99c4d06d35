"""Shared fixtures: a tiny BERT model directory built on the fly.

Provides: config.json, a WordLevel tokenizer.json and weights in both
checkpoint formats, so loading can be tested without network access.
"""

import json
from pathlib import Path

import pytest
import torch
from safetensors.torch import save_file

from tests.helpers import TINY_CONFIG, build_reference_model, build_tokenizer


@pytest.fixture
def tiny_model_dir(tmp_path: Path) -> Path:
    """Create a local model directory with config, tokenizer and both weight formats."""
    model_dir = tmp_path / "tiny-bert"
    model_dir.mkdir()

    (model_dir / "config.json").write_text(json.dumps(TINY_CONFIG), encoding="utf-8")

    tokenizer = build_tokenizer()
    # Saved with padding and truncation on; the adapter must switch both off
    tokenizer.enable_truncation(max_length=4)
    tokenizer.enable_padding(length=32)
    tokenizer.save(str(model_dir / "tokenizer.json"))

    state_dict = {key: tensor.contiguous() for key, tensor in build_reference_model().state_dict().items()}
    save_file(state_dict, str(model_dir / "model.safetensors"))
    torch.save(state_dict, model_dir / "pytorch_model.bin")

    return model_dir
