# tests/conftest.py
from __future__ import annotations

from typing import Callable

import pytest
from loguru import logger

from streamingml.bayesian.registry import ModelRegistry
from streamingml.bayesian.softmax_regression import SoftmaxRegression
from streamingml.config.classifier_config import ClassifierConfig


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


@pytest.fixture
def seeded_config() -> ClassifierConfig:
    return ClassifierConfig(seed=42)


@pytest.fixture
def registry(seeded_config) -> ModelRegistry:
    """
    Isolated registry per test (never the process-wide one).
    """
    return ModelRegistry(seeded_config)


@pytest.fixture
def make_model(seeded_config) -> Callable[..., SoftmaxRegression]:
    def _make(name: str = "m", n_features: int = 2, **overrides) -> SoftmaxRegression:
        cfg = seeded_config.model_copy(update=overrides) if overrides else seeded_config
        return SoftmaxRegression(name, n_features, cfg)

    return _make


def _train_two_classes(model: SoftmaxRegression, rounds: int = 50) -> SoftmaxRegression:
    """
    [1, 0] -> "A", [0, 1] -> "B", [1, 0] -> "A", repeated.
    """
    for _ in range(rounds):
        model.update([1.0, 0.0], "A")
        model.update([0.0, 1.0], "B")
        model.update([1.0, 0.0], "A")
    return model


@pytest.fixture
def train_two_classes() -> Callable[..., SoftmaxRegression]:
    return _train_two_classes


@pytest.fixture
def trained_model(make_model) -> SoftmaxRegression:
    return _train_two_classes(make_model())
