#!filepath: tests/adapters/test_query.py
import pytest

from streamingml.adapters.query import PredictQuery, UpdateQuery
from streamingml.utils.errors import ConfigurationError


def test_predict_query_defaults():
    q = PredictQuery.parse({"model_name": "m", "features": ["a"]})

    assert q.prediction_samples == 1000
    assert q.app_name is None


def test_parse_passes_through_instances():
    q = PredictQuery(model_name="m", features=["a"])

    assert PredictQuery.parse(q) is q


@pytest.mark.parametrize(
    "params",
    [
        {"features": ["a"]},                                        # missing model_name
        {"model_name": "", "features": ["a"]},                      # empty name
        {"model_name": 3, "features": ["a"]},                       # non-string name
        {"model_name": "m", "features": []},                        # no features
        {"model_name": "m", "features": ["a", "a"]},                # duplicates
        {"model_name": "m", "features": ["a"], "prediction_samples": 0},
        {"model_name": "m", "features": ["a"], "prediction_samples": -3},
        {"model_name": "m", "features": ["a"], "prediction_samples": 2.5},
        {"model_name": "m", "features": ["a"], "prediction_samples": "100"},
        {"model_name": "m", "features": ["a"], "unknown": 1},
    ],
)
def test_invalid_predict_query(params):
    with pytest.raises(ConfigurationError):
        PredictQuery.parse(params)


def test_update_query():
    q = UpdateQuery.parse({"model_name": "m", "features": ["a", "b"], "target": "y"})

    assert q.on_invalid == "raise"
    with pytest.raises(ConfigurationError):
        UpdateQuery.parse({"model_name": "m", "features": ["a"]})
    with pytest.raises(ConfigurationError):
        UpdateQuery.parse({"model_name": "m", "features": ["a"], "target": "y", "on_invalid": "drop"})
