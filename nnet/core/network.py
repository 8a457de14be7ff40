"""Single hidden layer feed-forward network with bias nodes."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import numpy as np

from .params import LogisticNeuralNet, NetworkParameters
from .types import Array, Layer, Node

_WEIGHT_KEYS = ("w_input_hidden", "w_hidden_output")
_WEIGHT_NODES = {
    "weight_input_hidden": "w_input_hidden",
    "weight_hidden_output": "w_hidden_output",
}


@dataclass(eq=False)
class FeedForwardNetwork:
    """Fixed-shape network of ``dim_input -> dim_hidden -> dim_output`` units.

    ``input`` and ``hidden`` carry one extra trailing slot holding the bias
    value of that layer. ``w_input_hidden[i, j]`` connects input ``i`` (bias
    included) to hidden unit ``j``; ``w_hidden_output[i, j]`` connects hidden
    ``i`` (bias included) to output ``j``.
    """

    dim_input: int
    dim_hidden: int
    dim_output: int
    params: NetworkParameters = LogisticNeuralNet
    seed: Optional[int] = None
    input: Array = field(init=False, repr=False)
    hidden: Array = field(init=False, repr=False)
    output: Array = field(init=False, repr=False)
    w_input_hidden: Array = field(init=False, repr=False)
    w_hidden_output: Array = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("dim_input", "dim_hidden", "dim_output"):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)) or value <= 0:
                raise ValueError(f"{name} must be an int > 0, got {value!r}")
        self.reset(self.seed)

    def reset(self, seed: Optional[int] = None) -> None:
        """Re-initialise weights and bias slots from the parameter policies."""

        rng = np.random.default_rng(seed)
        ni, nh, no = self.dim_input, self.dim_hidden, self.dim_output

        self.input = np.zeros(ni + 1, dtype=np.float64)
        self.hidden = np.zeros(nh + 1, dtype=np.float64)
        self.output = np.zeros(no, dtype=np.float64)
        self.input[ni] = self.params.bias(rng)
        self.hidden[nh] = self.params.bias(rng)

        self.w_input_hidden = np.asarray(
            self.params.weight(ni, nh, (ni + 1, nh), rng), dtype=np.float64
        )
        self.w_hidden_output = np.asarray(
            self.params.weight(nh, no, (nh + 1, no), rng), dtype=np.float64
        )

    def predict(self, values) -> Array:
        """Run the forward pass and return the (live) output layer.

        Activations are written in place; bias slots are left untouched.
        """

        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if values.shape[0] != self.dim_input:
            raise ValueError(
                f"expected {self.dim_input} input values, got {values.shape[0]}"
            )
        activation = self.params.activation
        self.input[: self.dim_input] = values
        self.hidden[: self.dim_hidden] = activation(self.input @ self.w_input_hidden)
        self.output[:] = activation(self.hidden @ self.w_hidden_output)
        return self.output

    def layer(self, which: Layer) -> Array:
        """Read-only view of an activation layer."""

        view = getattr(self, Layer(which).value).view()
        view.setflags(write=False)
        return view

    def node(self, coord: Node) -> float:
        array, index = self._locate(coord)
        return float(array[index])

    def set_node(self, coord: Node, value: float) -> None:
        array, index = self._locate(coord)
        if coord.kind in ("input", "hidden"):
            size = array.shape[0]
            # negative indices reach the bias slot too
            if -size <= index < size and index % size == size - 1:
                raise ValueError(f"bias slot {coord} is immutable")
        array[index] = value

    def _locate(self, coord: Node):
        if coord.kind in ("input", "hidden", "output"):
            return getattr(self, coord.kind), coord.i
        if coord.kind in _WEIGHT_NODES:
            if coord.j is None:
                raise ValueError(f"weight coordinate {coord} needs two indices")
            return getattr(self, _WEIGHT_NODES[coord.kind]), (coord.i, coord.j)
        raise ValueError(f"unknown node kind: {coord.kind!r}")

    def copy(self) -> "FeedForwardNetwork":
        return copy.deepcopy(self)

    def state_dict(self) -> Dict[str, Array]:
        return {
            "input_bias": np.array([self.input[self.dim_input]]),
            "hidden_bias": np.array([self.hidden[self.dim_hidden]]),
            "w_input_hidden": self.w_input_hidden.copy(),
            "w_hidden_output": self.w_hidden_output.copy(),
        }

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        for key in _WEIGHT_KEYS:
            if key not in state:
                raise KeyError(f"Missing weight {key} in state dict")
            current = getattr(self, key)
            if np.shape(state[key]) != current.shape:
                raise ValueError(
                    f"{key} has shape {np.shape(state[key])}, expected {current.shape}"
                )
        for key in _WEIGHT_KEYS:
            setattr(self, key, np.array(state[key], dtype=np.float64))
        if "input_bias" in state:
            self.input[self.dim_input] = float(np.asarray(state["input_bias"]).reshape(-1)[0])
        if "hidden_bias" in state:
            self.hidden[self.dim_hidden] = float(np.asarray(state["hidden_bias"]).reshape(-1)[0])

    def parameter_count(self) -> int:
        return int(self.w_input_hidden.size + self.w_hidden_output.size)


__all__ = ["FeedForwardNetwork"]
