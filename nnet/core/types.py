"""Core typing contracts for nnet."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import numpy as np

Array = np.ndarray


class Layer(Enum):
    """Activation layers of a network."""

    INPUT = "input"
    HIDDEN = "hidden"
    OUTPUT = "output"


@dataclass(frozen=True)
class Node:
    """Coordinate of a single activation or weight inside a network."""

    kind: str
    i: int
    j: Optional[int] = None

    @classmethod
    def input(cls, i: int) -> "Node":
        return cls("input", i)

    @classmethod
    def hidden(cls, i: int) -> "Node":
        return cls("hidden", i)

    @classmethod
    def output(cls, i: int) -> "Node":
        return cls("output", i)

    @classmethod
    def weight_input_hidden(cls, i: int, j: int) -> "Node":
        return cls("weight_input_hidden", i, j)

    @classmethod
    def weight_hidden_output(cls, i: int, j: int) -> "Node":
        return cls("weight_hidden_output", i, j)


@dataclass(frozen=True)
class TrainingSetMember:
    """A single ``(input, expected)`` example."""

    input: Array = field(repr=False)
    expected: Array = field(repr=False)

    def __post_init__(self) -> None:
        # stored read-only; shared across worker threads
        for name in ("input", "expected"):
            values = np.array(getattr(self, name), dtype=np.float64).reshape(-1)
            values.setflags(write=False)
            object.__setattr__(self, name, values)


TrainingSet = Sequence[TrainingSetMember]


@dataclass(frozen=True)
class TrainingResult:
    """Summary returned by ``train()`` on every trainer."""

    epochs: int
    error: Optional[float] = None


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`nnet.training.pipelines.run_pipeline`."""

    epochs: int
    error: Optional[float]
    metrics_path: str
    checkpoint_path: str
