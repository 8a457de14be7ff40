"""Core numerical primitives for nnet."""

from . import activations, network, params, types

__all__ = ["activations", "network", "params", "types"]
