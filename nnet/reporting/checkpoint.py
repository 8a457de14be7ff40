"""Network snapshots stored as compressed ``.npz`` archives."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from ..core.network import FeedForwardNetwork

logger = logging.getLogger(__name__)


def save_checkpoint(path: str | Path, network: FeedForwardNetwork) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        np.savez_compressed(handle, **network.state_dict())
    logger.debug("saved %r to %s", network, path)
    return path


def load_checkpoint(path: str | Path, network: FeedForwardNetwork) -> FeedForwardNetwork:
    """Load weights and biases from ``path`` into ``network`` (shapes must match)."""

    with np.load(Path(path)) as archive:
        network.load_state_dict({name: archive[name] for name in archive.files})
    return network


__all__ = ["load_checkpoint", "save_checkpoint"]
