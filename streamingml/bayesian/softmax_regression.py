#!filepath: streamingml/bayesian/softmax_regression.py
from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.special import softmax

from streamingml import logs
from streamingml.bayesian.feature_vector import FeatureVector
from streamingml.bayesian.label_set import ClassLabelSet
from streamingml.bayesian.posterior import PosteriorStore, build_posterior
from streamingml.config.classifier_config import ClassifierConfig
from streamingml.utils.errors import (
    ConfigurationError,
    InvalidInputError,
    ModelNotInitializedError,
)


@dataclass(frozen=True)
class Prediction:
    label: Any
    label_index: int
    confidence: float


class SoftmaxRegression:
    """
    Bayesian Softmax Regression model (FINAL)

    Contract:
    - n_features is fixed at construction and never changes
    - update():  exclusive, in lock order, all-or-nothing
    - predict_with_uncertainty(): lock-free snapshot read

    Lifecycle:
    - Uninitialized (0 classes) -> Active on first successful update
    """

    def __init__(
        self,
        name: str,
        n_features: int,
        config: Optional[ClassifierConfig] = None,
    ):
        if isinstance(n_features, bool) or not isinstance(n_features, int) or n_features < 1:
            raise ConfigurationError(
                f"Model [{name}] needs at least one feature, but found {n_features!r}"
            )

        self.name = name
        self.config = config if config is not None else ClassifierConfig()
        self._n_features = n_features
        self._prediction_samples = self.config.prediction_samples

        self._labels = ClassLabelSet()
        self._posterior: PosteriorStore = build_posterior(self.config, n_features + 1)
        self._n_updates = 0

        self._write_lock = threading.Lock()
        self._rng = np.random.default_rng(self.config.seed)
        self._log = logs.for_model(name)

    # --------------------------------------------------
    # Properties
    # --------------------------------------------------
    @property
    def n_features(self) -> int:
        return self._n_features

    @property
    def n_classes(self) -> int:
        return len(self._labels)

    @property
    def labels(self) -> Tuple[Any, ...]:
        return self._labels.as_tuple()

    @property
    def n_updates(self) -> int:
        return self._n_updates

    @property
    def posterior(self) -> PosteriorStore:
        """Current immutable snapshot."""
        return self._posterior

    @property
    def is_initialized(self) -> bool:
        return self._posterior.n_classes > 0

    @property
    def prediction_samples(self) -> int:
        return self._prediction_samples

    @prediction_samples.setter
    def prediction_samples(self, value: int) -> None:
        self._prediction_samples = _check_sample_count(value)

    def get_class_label(self, index: int) -> Any:
        return self._labels.label_of(index)

    # --------------------------------------------------
    # Update
    # --------------------------------------------------
    def update(self, features: Iterable[float], label: Hashable) -> float:
        """
        Apply one labeled observation.

        Returns the negative log-likelihood of `label` under the
        pre-update posterior.
        Raises DimensionMismatchError / InvalidInputError; on failure
        the posterior and label set are left untouched.
        """
        fv = FeatureVector.validated(features, self._n_features)
        _check_label(label)
        x = fv.augmented()

        with self._write_lock:
            posterior = self._posterior
            index = self._labels.index_of(label)
            is_new = index is None
            if is_new:
                index = posterior.n_classes
                posterior = posterior.with_new_class()

            posterior, loss = posterior.updated(x, index, self._rng)

            if not posterior.is_finite() or not math.isfinite(loss):
                raise InvalidInputError(
                    f"Model [{self.name}] update with features {fv.values.tolist()} "
                    f"produced a non-finite posterior; update rejected"
                )

            # labels first: readers only index labels through a snapshot,
            # and a snapshot never has more rows than the label set
            if is_new:
                self._labels.add(label)
            self._posterior = posterior
            self._n_updates += 1

        if is_new:
            self._log.info(
                f"[SoftmaxRegression] new class "
                f"label={label!r} index={index} n_classes={posterior.n_classes}"
            )
        self._log.debug(f"[SoftmaxRegression] update label={label!r} loss={loss:.6f}")
        return loss

    # --------------------------------------------------
    # Predict
    # --------------------------------------------------
    def predict_with_uncertainty(
        self,
        features: Iterable[float],
        sample_count: Optional[int] = None,
    ) -> Tuple[int, float]:
        """
        Monte-Carlo vote over `sample_count` posterior draws.

        Returns (winning class index, confidence).
        Winner = most votes, ties -> lowest index.
        Confidence per config.confidence_metric:
          mean : mean of softmax[winner] over draws
          std  : std of softmax[winner] over draws
          vote : fraction of draws voting for winner
        """
        fv = FeatureVector.validated(features, self._n_features)
        n = self._prediction_samples if sample_count is None else _check_sample_count(sample_count)

        posterior = self._posterior
        n_classes = posterior.n_classes
        if n_classes == 0:
            raise ModelNotInitializedError(
                f"Model [{self.name}] has no classes yet. Perform an update first."
            )

        logits = posterior.sample_logits(fv.augmented(), n, self._rng)
        if not np.all(np.isfinite(logits)):
            raise InvalidInputError(
                f"Model [{self.name}] cannot score features {fv.values.tolist()}: "
                f"logits overflow"
            )
        probs = softmax(logits, axis=1)
        votes = probs.argmax(axis=1)

        # bincount().argmax() returns the first maximum -> lowest index on ties
        winner = int(np.bincount(votes, minlength=n_classes).argmax())

        metric = self.config.confidence_metric
        if metric == "mean":
            confidence = float(probs[:, winner].mean())
        elif metric == "std":
            confidence = float(probs[:, winner].std())
        else:
            confidence = float(np.mean(votes == winner))

        return winner, min(max(confidence, 0.0), 1.0)

    def predict(
        self,
        features: Iterable[float],
        sample_count: Optional[int] = None,
    ) -> Prediction:
        index, confidence = self.predict_with_uncertainty(features, sample_count)
        return Prediction(
            label=self._labels.label_of(index),
            label_index=index,
            confidence=confidence,
        )

    def __repr__(self) -> str:
        return (
            f"SoftmaxRegression(name={self.name!r}, n_features={self._n_features}, "
            f"n_classes={self.n_classes}, posterior={self._posterior.kind!r})"
        )


def _check_sample_count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise InvalidInputError(
            f"Expected a sample count greater than zero, but found: {value!r}"
        )
    return int(value)


def _check_label(label) -> None:
    try:
        hash(label)
    except TypeError as e:
        raise InvalidInputError(f"Class label must be hashable, but found: {label!r}") from e
    # None / NaN / pd.NA / NaT
    if pd.api.types.is_scalar(label) and pd.isna(label):
        raise InvalidInputError(f"Invalid class label: {label!r}")
