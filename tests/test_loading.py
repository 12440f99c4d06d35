"""Tests for the model loading adapters."""

import json
from pathlib import Path

import numpy as np
import pytest
import torch

from longembed.config import ModelSourceConfig
from longembed.errors import ModelLoadError, TokenizeError
from longembed.loading import hub
from longembed.loading.encoder import BertEncoderAdapter
from longembed.loading.loader import load_model
from longembed.loading.model_config import read_encoder_config
from longembed.loading.tokenizer import HFTokenizerAdapter
from longembed.loading.weights import PickleWeightLoader, SafetensorsWeightLoader, WeightLoaderFactory
from tests.helpers import TINY_CONFIG, VOCAB, build_reference_model, build_tokenizer


class TestFetchModelFile:
    """Tests for hub file resolution."""

    def test_local_directory(self, tiny_model_dir: Path) -> None:
        """Test that files are taken from a local model directory."""
        path = hub.fetch_model_file(str(tiny_model_dir), "config.json")
        assert path == tiny_model_dir / "config.json"

    def test_local_directory_missing_file(self, tiny_model_dir: Path) -> None:
        """Test that a missing local file is a ModelLoadError."""
        with pytest.raises(ModelLoadError, match="vocab.txt"):
            hub.fetch_model_file(str(tiny_model_dir), "vocab.txt")

    def test_downloads_from_hub(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that repository ids are fetched with hf_hub_download."""
        calls: list[dict[str, object]] = []

        def fake_download(**kwargs: object) -> str:
            calls.append(kwargs)
            return str(tmp_path / str(kwargs["filename"]))

        monkeypatch.setattr(hub, "hf_hub_download", fake_download)

        path = hub.fetch_model_file("org/model", "config.json", revision="v1", cache_dir="/cache")

        assert path == tmp_path / "config.json"
        assert calls == [{"repo_id": "org/model", "filename": "config.json", "revision": "v1", "cache_dir": "/cache"}]

    def test_download_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that download errors become ModelLoadError."""

        def fake_download(**kwargs: object) -> str:
            raise OSError("network unreachable")

        monkeypatch.setattr(hub, "hf_hub_download", fake_download)

        with pytest.raises(ModelLoadError) as exc_info:
            hub.fetch_model_file("org/model", "model.safetensors")
        assert exc_info.value.model_id == "org/model"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_fetch_model_files(self, tiny_model_dir: Path) -> None:
        """Test resolving all three files at once."""
        files = hub.fetch_model_files(str(tiny_model_dir), "pytorch_model.bin")
        assert files.config.name == "config.json"
        assert files.tokenizer.name == "tokenizer.json"
        assert files.weights.name == "pytorch_model.bin"


class TestReadEncoderConfig:
    """Tests for config.json parsing."""

    def test_reads_dimensions(self, tiny_model_dir: Path) -> None:
        """Test that max_position_embeddings and hidden_size become the ModelSpec."""
        spec, raw = read_encoder_config(tiny_model_dir / "config.json")
        assert spec.max_seq_len == 8
        assert spec.hidden_size == 8
        assert raw["num_hidden_layers"] == 1

    @pytest.mark.parametrize("missing", ["max_position_embeddings", "hidden_size"])
    def test_missing_field(self, tmp_path: Path, missing: str) -> None:
        """Test that a missing required field is rejected."""
        data = {key: value for key, value in TINY_CONFIG.items() if key != missing}
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ValueError, match=missing):
            read_encoder_config(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        """Test that a JSON array is rejected."""
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            read_encoder_config(path)


class TestWeightLoaders:
    """Tests for the two checkpoint formats."""

    def test_factory(self) -> None:
        """Test that use_pth picks the checkpoint format."""
        assert isinstance(WeightLoaderFactory.create(use_pth=True), PickleWeightLoader)
        assert isinstance(WeightLoaderFactory.create(use_pth=False), SafetensorsWeightLoader)
        assert WeightLoaderFactory.create(use_pth=True).filename == "pytorch_model.bin"
        assert WeightLoaderFactory.create(use_pth=False).filename == "model.safetensors"

    def test_formats_agree(self, tiny_model_dir: Path) -> None:
        """Test that both loaders read the same tensors."""
        pickled = PickleWeightLoader().load(tiny_model_dir / "pytorch_model.bin")
        mapped = SafetensorsWeightLoader().load(tiny_model_dir / "model.safetensors")

        assert pickled.keys() == mapped.keys()
        for key, tensor in pickled.items():
            assert torch.equal(tensor, mapped[key])

    def test_pickle_not_a_dict(self, tmp_path: Path) -> None:
        """Test that a pickled tensor that is not a state dict is rejected."""
        path = tmp_path / "pytorch_model.bin"
        torch.save(torch.zeros(3), path)
        with pytest.raises(TypeError):
            PickleWeightLoader().load(path)


class TestHFTokenizerAdapter:
    """Tests for HFTokenizerAdapter."""

    def test_adds_special_tokens(self) -> None:
        """Test that [CLS] and [SEP] wrap the ids."""
        adapter = HFTokenizerAdapter(build_tokenizer())
        ids = adapter.encode("the quick fox")
        assert ids == [VOCAB.index(w) for w in ("[CLS]", "the", "quick", "fox", "[SEP]")]

    def test_without_special_tokens(self) -> None:
        """Test add_special_tokens=False."""
        adapter = HFTokenizerAdapter(build_tokenizer())
        assert adapter.encode("lazy dog", add_special_tokens=False) == [VOCAB.index("lazy"), VOCAB.index("dog")]

    def test_padding_and_truncation_disabled(self, tiny_model_dir: Path) -> None:
        """Test that a saved tokenizer with padding/truncation never pads or truncates."""
        adapter = HFTokenizerAdapter.from_file(tiny_model_dir / "tokenizer.json")
        text = " ".join(["the quick brown fox jumps over the lazy dog"] * 5)

        ids = adapter.encode(text)

        assert len(ids) == 45 + 2
        assert VOCAB.index("[PAD]") not in ids

    def test_configuration_fixed_at_construction(self) -> None:
        """Test that the wrapped tokenizer is reconfigured once, up front."""
        tokenizer = build_tokenizer()
        tokenizer.enable_truncation(max_length=3)
        tokenizer.enable_padding(length=10)

        HFTokenizerAdapter(tokenizer)

        assert tokenizer.truncation is None
        assert tokenizer.padding is None

    def test_rejects_non_string(self) -> None:
        """Test that invalid input raises TokenizeError."""
        adapter = HFTokenizerAdapter(build_tokenizer())
        with pytest.raises(TokenizeError):
            adapter.encode(None)  # type: ignore[arg-type]

    def test_empty_text(self) -> None:
        """Test that empty text still yields the special tokens."""
        adapter = HFTokenizerAdapter(build_tokenizer())
        assert adapter.encode("") == [VOCAB.index("[CLS]"), VOCAB.index("[SEP]")]


class TestBertEncoderAdapter:
    """Tests for BertEncoderAdapter."""

    def test_forward_matches_reference(self) -> None:
        """Test that the adapter reproduces the reference model's hidden states."""
        reference = build_reference_model()
        adapter = BertEncoderAdapter.from_state_dict(dict(TINY_CONFIG), reference.state_dict())

        token_ids = np.array([[2, 4, 5, 6, 3]], dtype=np.int64)
        type_ids = np.zeros_like(token_ids)
        hidden = adapter.forward(token_ids, type_ids)

        with torch.no_grad():
            expected = reference(input_ids=torch.as_tensor(token_ids), token_type_ids=torch.as_tensor(type_ids))

        assert hidden.shape == (1, 5, 8)
        assert hidden.dtype == np.float32
        np.testing.assert_allclose(hidden, expected.last_hidden_state.numpy(), rtol=1e-5, atol=1e-6)

    def test_forces_tanh_gelu(self) -> None:
        """Test that the configured activation is replaced."""
        adapter = BertEncoderAdapter.from_state_dict(dict(TINY_CONFIG), build_reference_model().state_dict())
        assert adapter.model.config.hidden_act == "gelu_new"
        assert adapter.hidden_size == 8
        assert not adapter.model.training

    def test_accepts_prefixed_checkpoint(self) -> None:
        """Test that keys saved from a task head ("bert." prefix) load."""
        reference = build_reference_model()
        prefixed = {f"bert.{key}": tensor for key, tensor in reference.state_dict().items()}
        prefixed["cls.predictions.bias"] = torch.zeros(len(VOCAB))

        adapter = BertEncoderAdapter.from_state_dict(dict(TINY_CONFIG), prefixed)

        weight = adapter.model.embeddings.word_embeddings.weight
        assert torch.equal(weight, reference.embeddings.word_embeddings.weight)

    def test_accepts_gamma_beta_names(self) -> None:
        """Test that LayerNorm.gamma/beta keys map onto weight/bias."""
        reference = build_reference_model()
        renamed = {}
        for key, tensor in reference.state_dict().items():
            key = key.replace("LayerNorm.weight", "LayerNorm.gamma").replace("LayerNorm.bias", "LayerNorm.beta")
            renamed[key] = tensor

        adapter = BertEncoderAdapter.from_state_dict(dict(TINY_CONFIG), renamed)

        assert torch.equal(adapter.model.embeddings.LayerNorm.weight, reference.embeddings.LayerNorm.weight)

    def test_missing_weights(self) -> None:
        """Test that an incomplete checkpoint is rejected."""
        state = build_reference_model().state_dict()
        state.pop("embeddings.word_embeddings.weight")
        with pytest.raises(ValueError, match="word_embeddings"):
            BertEncoderAdapter.from_state_dict(dict(TINY_CONFIG), state)


class TestLoadModel:
    """Tests for load_model."""

    @pytest.mark.parametrize("use_pth", [False, True])
    def test_loads_local_model(self, tiny_model_dir: Path, use_pth: bool) -> None:
        """Test loading a model directory in either weight format."""
        loaded = load_model(ModelSourceConfig(model_id=str(tiny_model_dir), use_pth=use_pth))
        assert loaded.spec.max_seq_len == 8
        assert loaded.spec.hidden_size == 8
        assert loaded.tokenizer.encode("the dog")[0] == VOCAB.index("[CLS]")

    @pytest.mark.parametrize("missing", ["max_position_embeddings", "hidden_size"])
    def test_missing_config_field(self, tiny_model_dir: Path, missing: str) -> None:
        """Test that a config without required dimensions fails to load."""
        data = {key: value for key, value in TINY_CONFIG.items() if key != missing}
        (tiny_model_dir / "config.json").write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ModelLoadError, match=missing):
            load_model(ModelSourceConfig(model_id=str(tiny_model_dir)))

    def test_malformed_config_json(self, tiny_model_dir: Path) -> None:
        """Test that unparseable config.json fails to load."""
        (tiny_model_dir / "config.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ModelLoadError, match="config.json"):
            load_model(ModelSourceConfig(model_id=str(tiny_model_dir)))

    def test_malformed_tokenizer(self, tiny_model_dir: Path) -> None:
        """Test that an unparseable tokenizer.json fails to load."""
        (tiny_model_dir / "tokenizer.json").write_text("{}", encoding="utf-8")
        with pytest.raises(ModelLoadError, match="tokenizer.json"):
            load_model(ModelSourceConfig(model_id=str(tiny_model_dir)))

    def test_missing_weights_file(self, tiny_model_dir: Path) -> None:
        """Test that a missing weights file fails to load."""
        (tiny_model_dir / "model.safetensors").unlink()
        with pytest.raises(ModelLoadError, match="model.safetensors"):
            load_model(ModelSourceConfig(model_id=str(tiny_model_dir)))

    def test_corrupt_weights_file(self, tiny_model_dir: Path) -> None:
        """Test that a corrupt weights file fails to load."""
        (tiny_model_dir / "model.safetensors").write_bytes(b"not a safetensors file")
        with pytest.raises(ModelLoadError, match="model.safetensors"):
            load_model(ModelSourceConfig(model_id=str(tiny_model_dir)))
