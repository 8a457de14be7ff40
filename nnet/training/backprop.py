"""Backward pass of a single hidden layer network."""

from __future__ import annotations

import numpy as np

from ..core.network import FeedForwardNetwork
from ..core.params import TrainerParameters
from ..core.types import TrainingSetMember
from .errors import mse
from .state import TrainerState


def update_state(
    network: FeedForwardNetwork,
    member: TrainingSetMember,
    state: TrainerState,
    params: TrainerParameters,
) -> None:
    """Predict ``member.input`` and accumulate deltas and errors into ``state``.

    Weights are only read here. Output terms must be computed first since the
    hidden error is back-propagated through the current output weights.
    """

    expected = np.asarray(member.expected, dtype=np.float64)
    if expected.shape[0] != network.dim_output:
        raise ValueError(
            f"expected {network.dim_output} target values, got {expected.shape[0]}"
        )

    network.predict(member.input)

    derivative = network.params.derivative
    gradient = params.error_gradient
    lrate = params.learning_rate
    momentum = params.momentum
    nh = network.dim_hidden

    state.eoutput[:] = gradient.output_error(expected, network.output, derivative)
    state.doutput[:] = (
        lrate * np.outer(network.hidden, state.eoutput) + momentum * state.doutput
    )

    wsum = network.w_hidden_output[:nh] @ state.eoutput
    state.ehidden[:] = gradient.hidden_error(network.hidden[:nh], wsum, derivative)
    state.dinput[:] = (
        lrate * np.outer(network.input, state.ehidden) + momentum * state.dinput
    )


def update_weights(network: FeedForwardNetwork, state: TrainerState) -> None:
    """Add the accumulated deltas to the network weights."""

    network.w_input_hidden += state.dinput
    network.w_hidden_output += state.doutput


__all__ = ["mse", "update_state", "update_weights"]
