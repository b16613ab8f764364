#!filepath: streamingml/adapters/update_adapter.py
from __future__ import annotations

from typing import Any, Mapping, Union

import numpy as np
import pandas as pd

from streamingml import logs
from streamingml.adapters.base_adapter import (
    BaseAdapter,
    StreamSchema,
    feature_matrix,
    schema_dtypes,
    validate_features,
)
from streamingml.adapters.query import UpdateQuery
from streamingml.bayesian.registry import ModelRegistry, model_registry, qualify_model_name
from streamingml.config.classifier_config import ClassifierConfig
from streamingml.observability.instrumentation import Instrumentation
from streamingml.utils.errors import ConfigurationError, InvalidInputError


class UpdateAdapter(BaseAdapter):
    """
    UpdateAdapter（冻结契约版）

    Query parameters:
        model_name : str, required
        target     : label attribute
        features   : >= 1 numeric stream attributes
        on_invalid : "raise" | "skip"

    Output:
        input attributes (unchanged) + loss

    The model is created on first use (first writer's feature count wins).
    Events are applied in row order, one update per event.
    """

    loss_column = "loss"

    def __init__(
        self,
        query: Union[UpdateQuery, Mapping[str, Any]],
        schema: StreamSchema,
        *,
        registry: ModelRegistry | None = None,
        config: ClassifierConfig | None = None,
        inst: Instrumentation | None = None,
    ):
        super().__init__(inst)
        self.query = UpdateQuery.parse(query)
        self.registry = registry if registry is not None else model_registry
        self.model_name = qualify_model_name(self.query.model_name, self.query.app_name)

        self.features = validate_features(schema, self.query.features)
        dtypes = schema_dtypes(schema)
        if self.query.target not in dtypes:
            raise ConfigurationError(
                f"Target [{self.query.target}] is not an attribute of the stream. "
                f"Available attributes: {list(dtypes)}"
            )
        if self.query.target in self.features:
            raise ConfigurationError(
                f"Target [{self.query.target}] cannot also be a model feature"
            )
        if self.loss_column in dtypes:
            raise ConfigurationError(
                f"Stream already defines output attribute [{self.loss_column}]"
            )

        self.model = self.registry.get_or_create(self.model_name, len(self.features), config)
        self._log = logs.for_model(self.model_name)
        if self.model.n_features != len(self.features):
            raise ConfigurationError(
                f"Model [{self.query.model_name}] expects {self.model.n_features} features, "
                f"but the query specifies {len(self.features)} features"
            )

    def process(self, chunk: pd.DataFrame) -> pd.DataFrame:
        with self.timer():
            X = feature_matrix(chunk, self.features)
            if self.query.target not in chunk.columns:
                raise ConfigurationError(
                    f"Event chunk is missing target attribute [{self.query.target}]"
                )
            y = chunk[self.query.target].tolist()

            losses = []
            skipped = 0
            for row, label in zip(X, y):
                try:
                    losses.append(self.model.update(row, label))
                except InvalidInputError as e:
                    if self.query.on_invalid == "raise":
                        raise
                    self._log.warning(f"[UpdateAdapter] event skipped: {e}")
                    losses.append(np.nan)
                    skipped += 1

            out = chunk.copy()
            out[self.loss_column] = pd.Series(losses, index=chunk.index, dtype="float64")

        self.inst.metrics.increment(f"{self.model_name}.updated", len(chunk) - skipped)
        if skipped:
            self.inst.metrics.increment(f"{self.model_name}.skipped", skipped)
        return out
