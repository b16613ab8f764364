# streamingml/bayesian/optimizers.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Tuple

import numpy as np

# Optimizer state is a plain dict of arrays shaped like the params
# (n_param_groups, K, D) plus scalars. Steps are functional: they
# return new arrays and never mutate the inputs.
OptimizerState = Dict[str, object]


class Optimizer(ABC):
    """
    Functional first-order optimizer (FINAL)
    """

    name: str = ""

    def __init__(self, learning_rate: float):
        self.learning_rate = learning_rate

    def init_state(self, shape: Tuple[int, ...]) -> OptimizerState:
        return {}

    @abstractmethod
    def step(
        self,
        params: np.ndarray,
        grads: np.ndarray,
        state: OptimizerState,
    ) -> Tuple[np.ndarray, OptimizerState]:
        raise NotImplementedError


class SGD(Optimizer):
    name = "sgd"

    def step(self, params, grads, state):
        return params - self.learning_rate * grads, state


class AdaGrad(Optimizer):
    name = "adagrad"
    eps = 1e-8

    def init_state(self, shape):
        return {"g2": np.zeros(shape)}

    def step(self, params, grads, state):
        g2 = state["g2"] + grads * grads
        new = params - self.learning_rate * grads / (np.sqrt(g2) + self.eps)
        return new, {"g2": g2}


class Adam(Optimizer):
    name = "adam"

    def __init__(
        self,
        learning_rate: float,
        beta1: float = 0.9,
        beta2: float = 0.999,
        eps: float = 1e-8,
    ):
        super().__init__(learning_rate)
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps

    def init_state(self, shape):
        return {"m": np.zeros(shape), "v": np.zeros(shape), "t": 0}

    def step(self, params, grads, state):
        t = int(state["t"]) + 1
        m = self.beta1 * state["m"] + (1 - self.beta1) * grads
        v = self.beta2 * state["v"] + (1 - self.beta2) * grads * grads

        # bias correction
        m_hat = m / (1 - self.beta1 ** t)
        v_hat = v / (1 - self.beta2 ** t)

        new = params - self.learning_rate * m_hat / (np.sqrt(v_hat) + self.eps)
        return new, {"m": m, "v": v, "t": t}


def grow_state(state: OptimizerState, axis: int = 1) -> OptimizerState:
    """
    New class row -> zero moments for that row.
    """
    grown: OptimizerState = {}
    for key, value in state.items():
        if isinstance(value, np.ndarray):
            pad = [(0, 0)] * value.ndim
            pad[axis] = (0, 1)
            grown[key] = np.pad(value, pad)
        else:
            grown[key] = value
    return grown


_OPTIMIZERS: Dict[str, Callable[[float], Optimizer]] = {
    "sgd": SGD,
    "adagrad": AdaGrad,
    "adam": Adam,
}


def resolve_optimizer(name: str, learning_rate: float) -> Optimizer:
    key = name.lower()
    if key not in _OPTIMIZERS:
        available = ", ".join(_OPTIMIZERS)
        raise ValueError(f"No optimizer named {name!r}. Available: {available}")
    return _OPTIMIZERS[key](learning_rate)
