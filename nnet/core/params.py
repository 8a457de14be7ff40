"""Parameter policies for networks and trainers.

A network is configured by :class:`NetworkParameters` (activation, its
derivative, weight and bias initialisers) and a trainer by
:class:`TrainerParameters` (learning rate, momentum, error gradient and the
aggregate error function). Both bundles are immutable and hold only stateless
callables, so a single instance can be shared between worker threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Protocol, Tuple, Union

import numpy as np

from . import activations
from .types import Array

ActivationFn = Callable[[Array], Array]
WeightFn = Callable[[int, int, Tuple[int, ...], np.random.Generator], Array]
BiasFn = Callable[[np.random.Generator], float]
ErrorFn = Callable[[Array, Array], float]


def default_weight(
    ins: int, outs: int, shape: Tuple[int, ...], rng: np.random.Generator
) -> Array:
    """Uniform weights in ``[-1/sqrt(ins), 1/sqrt(ins))``."""

    bound = 1.0 / np.sqrt(ins)
    return rng.uniform(-bound, bound, size=shape)


def zero_weight(
    ins: int, outs: int, shape: Tuple[int, ...], rng: np.random.Generator
) -> Array:
    return np.zeros(shape, dtype=np.float64)


def random_bias(rng: np.random.Generator) -> float:
    """Bias value drawn uniformly from ``[-0.5, 0.5)``."""

    return float(rng.uniform(-0.5, 0.5))


def negative_one_bias(rng: np.random.Generator) -> float:
    return -1.0


def positive_one_bias(rng: np.random.Generator) -> float:
    return 1.0


class ErrorGradient(Protocol):
    """Protocol for the per-node error terms of the backward pass."""

    def output_error(self, expected: Array, actual: Array, derivative: ActivationFn) -> Array:
        """Error term of output nodes given expected and actual activations."""

    def hidden_error(self, activation: Array, wsum: Array, derivative: ActivationFn) -> Array:
        """Error term of hidden nodes given the back-propagated weighted sum."""


@dataclass(frozen=True)
class DefaultErrorGradient:
    """``f'(y) * (expected - y)`` at the output, ``f'(y) * wsum`` in the hidden layer.

    Deltas computed from these terms are *added* to the weights.
    """

    def output_error(self, expected: Array, actual: Array, derivative: ActivationFn) -> Array:
        return derivative(actual) * (expected - actual)

    def hidden_error(self, activation: Array, wsum: Array, derivative: ActivationFn) -> Array:
        return derivative(activation) * wsum


@dataclass(frozen=True)
class NetworkParameters:
    """Activation and initialisation policies of a network."""

    activation: ActivationFn
    derivative: ActivationFn
    weight: WeightFn = default_weight
    bias: BiasFn = negative_one_bias


@dataclass(frozen=True)
class TrainerParameters:
    """Learning policies shared by every trainer."""

    learning_rate: float = 0.1
    momentum: float = 0.0
    error_gradient: ErrorGradient = field(default_factory=DefaultErrorGradient)
    error_function: Union[str, ErrorFn] = "mse"

    def __post_init__(self) -> None:
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.momentum < 0:
            raise ValueError(f"momentum must be non-negative, got {self.momentum}")


LogisticNeuralNet = NetworkParameters(
    activation=activations.logistic,
    derivative=activations.logistic_deriv,
    weight=default_weight,
    bias=negative_one_bias,
)

TanhNeuralNet = NetworkParameters(
    activation=activations.tanh,
    derivative=activations.tanh_deriv,
    weight=default_weight,
    bias=positive_one_bias,
)

ReluNeuralNet = NetworkParameters(
    activation=activations.relu,
    derivative=activations.relu_deriv,
    weight=default_weight,
    bias=positive_one_bias,
)

NETWORK_PRESETS: Dict[str, NetworkParameters] = {
    "logistic": LogisticNeuralNet,
    "tanh": TanhNeuralNet,
    "relu": ReluNeuralNet,
}


def network_parameters(name: str) -> NetworkParameters:
    try:
        return NETWORK_PRESETS[name]
    except KeyError as exc:
        available = ", ".join(sorted(NETWORK_PRESETS))
        raise KeyError(f"Unknown activation {name!r}. Available: {available}") from exc


__all__ = [
    "DefaultErrorGradient",
    "ErrorGradient",
    "LogisticNeuralNet",
    "NETWORK_PRESETS",
    "NetworkParameters",
    "ReluNeuralNet",
    "TanhNeuralNet",
    "TrainerParameters",
    "default_weight",
    "negative_one_bias",
    "network_parameters",
    "positive_one_bias",
    "random_bias",
    "zero_weight",
]
