"""Scratch state of a backpropagation trainer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from ..core.network import FeedForwardNetwork
from ..core.types import Array

_SLOTS = ("dinput", "doutput", "ehidden", "eoutput")


@dataclass(eq=False)
class TrainerState:
    """Weight deltas and node error terms of one backward pass.

    ``dinput`` and ``doutput`` persist between examples so that the momentum
    term can build on the previous delta.
    """

    dinput: Array = field(repr=False)
    doutput: Array = field(repr=False)
    ehidden: Array = field(repr=False)
    eoutput: Array = field(repr=False)

    @classmethod
    def for_network(cls, network: FeedForwardNetwork) -> "TrainerState":
        ni, nh, no = network.dim_input, network.dim_hidden, network.dim_output
        return cls(
            dinput=np.zeros((ni + 1, nh), dtype=np.float64),
            doutput=np.zeros((nh + 1, no), dtype=np.float64),
            ehidden=np.zeros(nh, dtype=np.float64),
            eoutput=np.zeros(no, dtype=np.float64),
        )

    def copy(self) -> "TrainerState":
        return TrainerState(*(getattr(self, name).copy() for name in _SLOTS))

    def matches(self, network: FeedForwardNetwork) -> bool:
        return (
            self.dinput.shape == network.w_input_hidden.shape
            and self.doutput.shape == network.w_hidden_output.shape
        )

    def combine(self, states: Iterable["TrainerState"]) -> "TrainerState":
        """Fold ``states`` into this one as a running average.

        ``self`` counts as the first contributor, so the result is the mean of
        ``self`` and every peer. Returns ``self``.
        """

        count = 1.0
        for other in states:
            for name in _SLOTS:
                expected, got = getattr(self, name).shape, getattr(other, name).shape
                if expected != got:
                    raise ValueError(f"cannot combine {name} of shape {got} into {expected}")
            for name in _SLOTS:
                acc = getattr(self, name)
                peer = getattr(other, name)
                acc *= count
                acc += peer
                acc /= count + 1.0
            count += 1.0
        return self


__all__ = ["TrainerState"]
