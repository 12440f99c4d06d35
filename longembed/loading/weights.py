"""Weight loaders for the two supported checkpoint formats."""

import logging
from pathlib import Path
from typing import Protocol

import torch
from safetensors.torch import load_file

logger = logging.getLogger(__name__)


class WeightLoader(Protocol):
    """Protocol for reading a checkpoint into a state dict."""

    filename: str

    def load(self, path: Path) -> dict[str, torch.Tensor]:
        """Read all tensors from path."""
        ...


class PickleWeightLoader:
    """Loads legacy pytorch_model.bin checkpoints with torch.load."""

    filename = "pytorch_model.bin"

    def load(self, path: Path) -> dict[str, torch.Tensor]:
        """Read a pickled state dict.

        Only tensors and plain containers are unpickled (weights_only=True).

        Raises:
            TypeError: If the file does not hold a dict of tensors.
        """
        logger.info("Loading pickled weights from %s", path)
        obj = torch.load(path, map_location="cpu", weights_only=True)
        if not isinstance(obj, dict):
            raise TypeError(f"Expected a state dict in {path.name}, got {type(obj).__name__}")
        return obj


class SafetensorsWeightLoader:
    """Loads model.safetensors checkpoints through a memory map."""

    filename = "model.safetensors"

    def load(self, path: Path) -> dict[str, torch.Tensor]:
        """Read all tensors from a safetensors file."""
        logger.info("Loading safetensors weights from %s", path)
        return load_file(str(path), device="cpu")


class WeightLoaderFactory:
    """Factory for picking the weight loader by checkpoint format."""

    @classmethod
    def create(cls, use_pth: bool) -> WeightLoader:
        """Create a weight loader.

        Args:
            use_pth: True for pytorch_model.bin, False for model.safetensors.

        Returns:
            WeightLoader instance.
        """
        if use_pth:
            return PickleWeightLoader()
        return SafetensorsWeightLoader()
