#!filepath: tests/bayesian/test_optimizers.py
import numpy as np
import pytest

from streamingml.bayesian.optimizers import Adam, AdaGrad, SGD, grow_state, resolve_optimizer


def test_sgd_step():
    opt = SGD(learning_rate=0.1)
    params = np.array([1.0, -1.0])

    new, state = opt.step(params, np.array([2.0, -2.0]), opt.init_state(params.shape))

    np.testing.assert_allclose(new, [0.8, -0.8])
    assert state == {}


def test_adam_first_step_moves_by_learning_rate():
    opt = Adam(learning_rate=0.01)
    params = np.zeros(3)
    state = opt.init_state(params.shape)

    new, state = opt.step(params, np.array([5.0, -0.1, 0.0]), state)

    # bias-corrected first step = lr * sign(g)
    np.testing.assert_allclose(new, [-0.01, 0.01, 0.0], atol=1e-6)
    assert state["t"] == 1


def test_adagrad_accumulates():
    opt = AdaGrad(learning_rate=1.0)
    params = np.zeros(1)
    state = opt.init_state(params.shape)

    params, state = opt.step(params, np.array([3.0]), state)
    params, state = opt.step(params, np.array([4.0]), state)

    np.testing.assert_allclose(state["g2"], [25.0])
    np.testing.assert_allclose(params, [-1.0 - 4.0 / 5.0], atol=1e-6)


def test_step_does_not_mutate_inputs():
    opt = Adam(learning_rate=0.1)
    params = np.ones((2, 2))
    state = opt.init_state(params.shape)

    opt.step(params, np.ones((2, 2)), state)

    np.testing.assert_array_equal(params, np.ones((2, 2)))
    np.testing.assert_array_equal(state["m"], np.zeros((2, 2)))


def test_grow_state_pads_class_axis():
    state = {"m": np.ones((2, 3, 4)), "t": 5}

    grown = grow_state(state, axis=1)

    assert grown["m"].shape == (2, 4, 4)
    np.testing.assert_array_equal(grown["m"][:, 3, :], 0.0)
    assert grown["t"] == 5


def test_resolve_optimizer():
    assert isinstance(resolve_optimizer("ADAM", 0.1), Adam)
    assert resolve_optimizer("sgd", 0.3).learning_rate == 0.3
    with pytest.raises(ValueError, match="Available"):
        resolve_optimizer("rmsprop", 0.1)
