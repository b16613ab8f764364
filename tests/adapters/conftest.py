# tests/adapters/conftest.py
from __future__ import annotations

import pandas as pd
import pytest


@pytest.fixture
def train_chunk() -> pd.DataFrame:
    """
    [1, 0] -> A, [0, 1] -> B, [1, 0] -> A   x 50
    """
    rows = []
    for _ in range(50):
        rows.append({"attribute_0": 1.0, "attribute_1": 0.0, "label": "A"})
        rows.append({"attribute_0": 0.0, "attribute_1": 1.0, "label": "B"})
        rows.append({"attribute_0": 1.0, "attribute_1": 0.0, "label": "A"})
    return pd.DataFrame(rows)


@pytest.fixture
def predict_chunk() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": [10, 11, 12],
            "attribute_0": [1.0, 0.0, 0.9],
            "attribute_1": [0.0, 1.0, 0.1],
        },
        index=[100, 101, 102],
    )


@pytest.fixture
def update_query() -> dict:
    return {
        "model_name": "model1",
        "target": "label",
        "features": ["attribute_0", "attribute_1"],
    }


@pytest.fixture
def predict_query() -> dict:
    return {
        "model_name": "model1",
        "features": ["attribute_0", "attribute_1"],
        "prediction_samples": 500,
    }
