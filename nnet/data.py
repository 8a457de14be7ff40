"""Training set helpers."""

from __future__ import annotations

from typing import Callable, Dict, List

import numpy as np

from .core.types import TrainingSetMember

_TRUTH_INPUTS = ((0.0, 0.0), (0.0, 1.0), (1.0, 0.0), (1.0, 1.0))


def from_arrays(inputs, targets) -> List[TrainingSetMember]:
    """Pair the rows of ``inputs`` and ``targets`` into training examples."""

    X = np.atleast_2d(np.asarray(inputs, dtype=np.float64))
    Y = np.asarray(targets, dtype=np.float64)
    Y = Y.reshape(-1, 1) if Y.ndim == 1 else np.atleast_2d(Y)
    if X.shape[0] != Y.shape[0]:
        raise ValueError(f"got {X.shape[0]} inputs but {Y.shape[0]} targets")
    return [TrainingSetMember(input=x, expected=y) for x, y in zip(X, Y)]


def _truth_table(op: Callable[[bool, bool], bool]) -> List[TrainingSetMember]:
    targets = [float(op(bool(a), bool(b))) for a, b in _TRUTH_INPUTS]
    return from_arrays(_TRUTH_INPUTS, targets)


def xor() -> List[TrainingSetMember]:
    """The canonical ``{(0,0)->0, (0,1)->1, (1,0)->1, (1,1)->0}`` set."""

    return _truth_table(lambda a, b: a != b)


def logical_and() -> List[TrainingSetMember]:
    return _truth_table(lambda a, b: a and b)


def logical_or() -> List[TrainingSetMember]:
    return _truth_table(lambda a, b: a or b)


DATASETS: Dict[str, Callable[[], List[TrainingSetMember]]] = {
    "xor": xor,
    "and": logical_and,
    "or": logical_or,
}


def get(name: str) -> List[TrainingSetMember]:
    try:
        builder = DATASETS[name]
    except KeyError as exc:
        available = ", ".join(sorted(DATASETS))
        raise KeyError(f"Unknown dataset {name!r}. Available: {available}") from exc
    return builder()


__all__ = ["DATASETS", "from_arrays", "get", "logical_and", "logical_or", "xor"]
