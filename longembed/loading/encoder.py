"""Encoder adapter backed by a transformers BertModel."""

import logging
from typing import Any

import numpy as np
import torch
from numpy.typing import NDArray
from transformers import BertConfig, BertModel

logger = logging.getLogger(__name__)

# tanh approximation of GELU, used for every loaded encoder
HIDDEN_ACT = "gelu_new"

_IGNORED_MISSING_SUFFIXES = ("position_ids",)


def _canonical_key(key: str, prefix: str) -> str:
    """Map a checkpoint key onto BertModel's own parameter names."""
    if key.startswith(prefix):
        key = key[len(prefix) :]
    # Old TF-converted checkpoints name LayerNorm params gamma/beta
    if key.endswith("LayerNorm.gamma"):
        key = key[: -len("gamma")] + "weight"
    elif key.endswith("LayerNorm.beta"):
        key = key[: -len("beta")] + "bias"
    return key


class BertEncoderAdapter:
    """Runs one token window through a BERT encoder.

    Args:
        model: A BertModel; it is switched to eval mode.
        device: torch device to run on.
    """

    def __init__(self, model: BertModel, device: str = "cpu") -> None:
        self.device = torch.device(device)
        self.model = model.to(self.device)
        self.model.eval()

    @property
    def hidden_size(self) -> int:
        """Per-token hidden state size."""
        return int(self.model.config.hidden_size)

    @classmethod
    def from_state_dict(
        cls,
        config: dict[str, Any],
        state_dict: dict[str, torch.Tensor],
        device: str = "cpu",
    ) -> "BertEncoderAdapter":
        """Build a BertModel from a config mapping and load weights into it.

        Checkpoints saved from task heads (keys prefixed with "bert.") are accepted.

        Args:
            config: Contents of config.json.
            state_dict: Tensors read by a WeightLoader.
            device: torch device to run on.

        Returns:
            BertEncoderAdapter instance.

        Raises:
            ValueError: If the checkpoint is missing encoder weights.
        """
        bert_config = BertConfig.from_dict({**config, "hidden_act": HIDDEN_ACT})
        model = BertModel(bert_config, add_pooling_layer=False)

        prefix = f"{bert_config.model_type}."
        state = {_canonical_key(key, prefix): tensor for key, tensor in state_dict.items()}
        missing, unexpected = model.load_state_dict(state, strict=False)

        missing = [key for key in missing if not key.endswith(_IGNORED_MISSING_SUFFIXES)]
        if missing:
            shown = ", ".join(missing[:5])
            raise ValueError(f"Checkpoint is missing {len(missing)} encoder weight(s): {shown}")
        if unexpected:
            logger.debug("Ignoring %d checkpoint tensor(s) not used by the encoder", len(unexpected))

        logger.info(
            "Loaded BERT encoder: layers=%d hidden_size=%d max_position_embeddings=%d",
            bert_config.num_hidden_layers,
            bert_config.hidden_size,
            bert_config.max_position_embeddings,
        )
        return cls(model, device=device)

    def forward(self, token_ids: NDArray[np.int64], token_type_ids: NDArray[np.int64]) -> NDArray[np.float32]:
        """Encode one window.

        Args:
            token_ids: Array of shape [1, n_tokens].
            token_type_ids: Array of shape [1, n_tokens].

        Returns:
            Hidden states of shape [1, n_tokens, hidden_size].
        """
        input_ids = torch.as_tensor(token_ids, dtype=torch.long, device=self.device)
        type_ids = torch.as_tensor(token_type_ids, dtype=torch.long, device=self.device)

        with torch.no_grad():
            output = self.model(input_ids=input_ids, token_type_ids=type_ids)

        hidden: NDArray[np.float32] = output.last_hidden_state.float().cpu().numpy()
        return hidden
