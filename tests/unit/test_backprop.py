import numpy as np
import pytest

from nnet.core.network import FeedForwardNetwork
from nnet.core.params import TrainerParameters
from nnet.core.types import TrainingSetMember
from nnet.training.backprop import update_state, update_weights
from nnet.training.errors import REGISTRY, cross_entropy, mse
from nnet.training.state import TrainerState


def _reference_update(net, member, dinput, doutput, lrate, momentum):
    """Scalar loop version of the backward pass."""

    deriv = net.params.derivative
    ni, nh, no = net.dim_input, net.dim_hidden, net.dim_output
    inp, hid, out = net.input, net.hidden, net.output
    eoutput = np.zeros(no)
    ehidden = np.zeros(nh)
    for i in range(no):
        eoutput[i] = deriv(out[i]) * (member.expected[i] - out[i])
        for j in range(nh + 1):
            doutput[j][i] = lrate * hid[j] * eoutput[i] + momentum * doutput[j][i]
    for i in range(nh):
        wsum = sum(net.w_hidden_output[i][j] * eoutput[j] for j in range(no))
        ehidden[i] = deriv(hid[i]) * wsum
        for j in range(ni + 1):
            dinput[j][i] = lrate * inp[j] * ehidden[i] + momentum * dinput[j][i]
    return eoutput, ehidden


def test_update_state_matches_scalar_reference():
    net = FeedForwardNetwork(3, 4, 2, seed=9)
    member = TrainingSetMember(input=[0.3, -0.7, 0.9], expected=[1.0, 0.0])
    params = TrainerParameters(learning_rate=0.2, momentum=0.3)
    state = TrainerState.for_network(net)
    state.dinput[...] = 0.01
    state.doutput[...] = -0.02

    ref_dinput = state.dinput.copy()
    ref_doutput = state.doutput.copy()
    weights_before = net.state_dict()

    update_state(net, member, state, params)
    eoutput, ehidden = _reference_update(net, member, ref_dinput, ref_doutput, 0.2, 0.3)

    assert np.allclose(state.eoutput, eoutput)
    assert np.allclose(state.ehidden, ehidden)
    assert np.allclose(state.doutput, ref_doutput)
    assert np.allclose(state.dinput, ref_dinput)
    # the backward pass never writes weights
    assert np.array_equal(net.w_input_hidden, weights_before["w_input_hidden"])
    assert np.array_equal(net.w_hidden_output, weights_before["w_hidden_output"])


def test_momentum_builds_on_previous_delta():
    net = FeedForwardNetwork(2, 3, 1, seed=1)
    member = TrainingSetMember(input=[1.0, 0.0], expected=[1.0])
    params = TrainerParameters(learning_rate=0.1, momentum=0.5)
    state = TrainerState.for_network(net)
    update_state(net, member, state, params)
    first = state.doutput.copy(), state.dinput.copy()
    update_state(net, member, state, params)
    assert np.allclose(state.doutput, 1.5 * first[0])
    assert np.allclose(state.dinput, 1.5 * first[1])


def test_update_weights_adds_deltas():
    net = FeedForwardNetwork(2, 2, 1, seed=4)
    state = TrainerState.for_network(net)
    state.dinput[...] = 0.5
    state.doutput[...] = -0.25
    before = net.state_dict()
    update_weights(net, state)
    assert np.allclose(net.w_input_hidden, before["w_input_hidden"] + 0.5)
    assert np.allclose(net.w_hidden_output, before["w_hidden_output"] - 0.25)


def test_single_step_reduces_error():
    net = FeedForwardNetwork(2, 3, 1, seed=2)
    member = TrainingSetMember(input=[1.0, 1.0], expected=[1.0])
    params = TrainerParameters(learning_rate=0.5)
    state = TrainerState.for_network(net)
    before = mse(net.predict(member.input), member.expected)
    update_state(net, member, state, params)
    update_weights(net, state)
    after = mse(net.predict(member.input), member.expected)
    assert after < before


def test_update_state_rejects_wrong_expected_length():
    net = FeedForwardNetwork(2, 3, 1)
    state = TrainerState.for_network(net)
    member = TrainingSetMember(input=[0.0, 1.0], expected=[1.0, 0.0])
    with pytest.raises(ValueError):
        update_state(net, member, state, TrainerParameters())


def test_error_functions():
    assert mse(np.array([1.0, 0.0]), np.array([0.0, 0.0])) == pytest.approx(0.5)
    assert cross_entropy(np.array([1.0]), np.array([1.0])) == pytest.approx(0.0, abs=1e-9)
    assert REGISTRY.resolve("mse").name == "mse"
    custom = REGISTRY.resolve(lambda p, e: 3.0)
    assert custom(np.zeros(1), np.zeros(1)) == 3.0
    with pytest.raises(KeyError):
        REGISTRY.resolve("hinge")
