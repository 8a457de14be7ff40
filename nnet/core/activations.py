"""Activation functions and their derivatives.

Derivatives take the *activated* value ``y = f(x)``, which is what the
backward pass has at hand after ``predict``.
"""

from __future__ import annotations

import numpy as np

from .types import Array


def logistic(x: Array) -> Array:
    """Return the logistic sigmoid."""

    return 1.0 / (1.0 + np.exp(-x))


def logistic_deriv(y: Array) -> Array:
    return y * (1.0 - y)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_deriv(y: Array) -> Array:
    return 1.0 - np.square(y)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_deriv(y: Array) -> Array:
    return (np.asarray(y) > 0).astype(np.float64)


__all__ = [
    "logistic",
    "logistic_deriv",
    "tanh",
    "tanh_deriv",
    "relu",
    "relu_deriv",
]
