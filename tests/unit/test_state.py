import itertools

import numpy as np
import pytest

from nnet.core.network import FeedForwardNetwork
from nnet.training.state import TrainerState


def _random_state(net, seed):
    rng = np.random.default_rng(seed)
    state = TrainerState.for_network(net)
    for name in ("dinput", "doutput", "ehidden", "eoutput"):
        arr = getattr(state, name)
        arr[...] = rng.standard_normal(arr.shape)
    return state


def _slots(state):
    return [state.dinput, state.doutput, state.ehidden, state.eoutput]


def test_state_matches_network_dimensions():
    net = FeedForwardNetwork(3, 4, 2)
    state = TrainerState.for_network(net)
    assert state.dinput.shape == (4, 4)
    assert state.doutput.shape == (5, 2)
    assert state.ehidden.shape == (4,)
    assert state.eoutput.shape == (2,)
    assert all(np.all(arr == 0.0) for arr in _slots(state))
    assert state.matches(net)
    assert not state.matches(FeedForwardNetwork(3, 5, 2))


def test_combine_is_the_arithmetic_mean():
    net = FeedForwardNetwork(2, 3, 1)
    states = [_random_state(net, seed) for seed in range(4)]
    expected = [np.mean(arrs, axis=0) for arrs in zip(*map(_slots, states))]
    acc = states[0].copy()
    acc.combine(s.copy() for s in states[1:])
    for got, want in zip(_slots(acc), expected):
        assert np.allclose(got, want)


def test_combine_is_order_insensitive():
    net = FeedForwardNetwork(2, 3, 2)
    a, b, c = (_random_state(net, seed) for seed in (1, 2, 3))
    results = []
    for first, *rest in itertools.permutations([a, b, c]):
        results.append(first.copy().combine([s.copy() for s in rest]))
    for other in results[1:]:
        for x, y in zip(_slots(results[0]), _slots(other)):
            assert np.allclose(x, y)


def test_combine_identical_states_is_noop():
    net = FeedForwardNetwork(3, 2, 2)
    state = _random_state(net, 7)
    acc = state.copy().combine([state.copy() for _ in range(5)])
    for got, want in zip(_slots(acc), _slots(state)):
        assert np.allclose(got, want)


def test_combine_with_no_peers_leaves_state_unchanged():
    net = FeedForwardNetwork(2, 2, 1)
    state = _random_state(net, 0)
    before = [arr.copy() for arr in _slots(state)]
    assert state.combine([]) is state
    for got, want in zip(_slots(state), before):
        assert np.array_equal(got, want)


def test_combine_rejects_mismatched_shapes():
    acc = _random_state(FeedForwardNetwork(2, 3, 1), 0)
    before = [arr.copy() for arr in _slots(acc)]
    other = _random_state(FeedForwardNetwork(2, 4, 1), 1)
    with pytest.raises(ValueError):
        acc.combine([other])
    for got, want in zip(_slots(acc), before):
        assert np.array_equal(got, want)


def test_copy_does_not_alias():
    state = _random_state(FeedForwardNetwork(2, 2, 1), 0)
    clone = state.copy()
    clone.dinput += 1.0
    assert not np.allclose(clone.dinput, state.dinput)


def test_states_compare_by_identity():
    state = TrainerState.for_network(FeedForwardNetwork(2, 2, 1))
    clone = state.copy()
    assert state == state
    assert state != clone
    assert len({state, clone}) == 2
