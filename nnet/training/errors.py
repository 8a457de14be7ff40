"""Registry of aggregate error functions used to judge an epoch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Union

import numpy as np

from ..core.types import Array

ErrorFn = Callable[[Array, Array], float]


@dataclass(frozen=True)
class ErrorFunction:
    """Named wrapper mapping ``(predictions, expected)`` to a scalar error."""

    name: str
    fn: ErrorFn

    def __call__(self, predictions: Array, expected: Array) -> float:
        return float(self.fn(predictions, expected))


class ErrorFunctionRegistry:
    """Central registry for error functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, ErrorFunction] = {}

    def register(self, name: str, fn: ErrorFn) -> None:
        self._registry[name] = ErrorFunction(name, fn)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, fn: Union[str, ErrorFn]) -> ErrorFunction:
        if isinstance(fn, ErrorFunction):
            return fn
        if callable(fn):
            return ErrorFunction(getattr(fn, "__name__", "custom"), fn)
        if fn not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown error function {fn!r}. Available: {available}")
        return self._registry[fn]


REGISTRY = ErrorFunctionRegistry()


def mse(predictions: Array, expected: Array) -> float:
    """Mean squared difference between predictions and expected values."""

    diff = np.asarray(predictions, dtype=np.float64) - np.asarray(expected, dtype=np.float64)
    return float(np.mean(np.square(diff)))


def cross_entropy(predictions: Array, expected: Array) -> float:
    eps = 1e-12
    preds = np.asarray(predictions, dtype=np.float64)
    exp = np.asarray(expected, dtype=np.float64)
    return float(-np.mean(exp * np.log(preds + eps)))


REGISTRY.register("mse", mse)
REGISTRY.register("ce", cross_entropy)

__all__ = ["ErrorFunction", "ErrorFunctionRegistry", "REGISTRY", "cross_entropy", "mse"]
