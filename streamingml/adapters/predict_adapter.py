#!filepath: streamingml/adapters/predict_adapter.py
from __future__ import annotations

import threading
from typing import Any, Mapping, Union

import pandas as pd

from streamingml import logs
from streamingml.adapters.base_adapter import (
    BaseAdapter,
    StreamSchema,
    feature_matrix,
    schema_dtypes,
    validate_features,
)
from streamingml.adapters.query import PredictQuery
from streamingml.bayesian.registry import ModelRegistry, model_registry, qualify_model_name
from streamingml.observability.instrumentation import Instrumentation
from streamingml.utils.errors import ConfigurationError


class PredictAdapter(BaseAdapter):
    """
    PredictAdapter（冻结契约版）

    Query parameters:
        model_name          : str, required
        prediction_samples  : int > 0, default 1000
        features            : >= 1 numeric stream attributes

    Output:
        input attributes (unchanged) + prediction + confidence

    Init fails with ConfigurationError when the model was never updated
    or expects a different number of features.
    """

    prediction_column = "prediction"
    confidence_column = "confidence"

    def __init__(
        self,
        query: Union[PredictQuery, Mapping[str, Any]],
        schema: StreamSchema,
        *,
        registry: ModelRegistry | None = None,
        inst: Instrumentation | None = None,
    ):
        super().__init__(inst)
        self.query = PredictQuery.parse(query)
        self.registry = registry if registry is not None else model_registry
        self.model_name = qualify_model_name(self.query.model_name, self.query.app_name)

        self.features = validate_features(schema, self.query.features)
        clash = {self.prediction_column, self.confidence_column} & set(schema_dtypes(schema))
        if clash:
            raise ConfigurationError(
                f"Stream already defines output attributes {sorted(clash)}"
            )

        self.model = self.registry.require(self.model_name)
        self._log = logs.for_model(self.model_name)
        if self.model.n_features != len(self.features):
            raise ConfigurationError(
                f"Model [{self.query.model_name}] expects {self.model.n_features} features, "
                f"but the query specifies {len(self.features)} features"
            )

        # chunk-level critical section (per adapter instance)
        self._lock = threading.Lock()

    def process(self, chunk: pd.DataFrame) -> pd.DataFrame:
        with self.timer(), self._lock:
            X = feature_matrix(chunk, self.features)

            labels = []
            confidences = []
            for row in X:
                self._log.debug(f"[PredictAdapter] event received; features={row.tolist()}")
                pred = self.model.predict(row, self.query.prediction_samples)
                labels.append(pred.label)
                confidences.append(pred.confidence)

            out = chunk.copy()
            out[self.prediction_column] = pd.Series(labels, index=chunk.index, dtype=object)
            out[self.confidence_column] = pd.Series(confidences, index=chunk.index, dtype="float64")

        self.inst.metrics.increment(f"{self.model_name}.predicted", len(chunk))
        return out
