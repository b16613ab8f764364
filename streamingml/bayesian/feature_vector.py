#!filepath: streamingml/bayesian/feature_vector.py
from __future__ import annotations

from typing import Iterable, Iterator, Optional

import numpy as np

from streamingml.utils.errors import DimensionMismatchError, InvalidInputError


class FeatureVector:
    """
    FeatureVector (FROZEN)

    Fixed-length, finite, read-only float64 vector.
    The bias term is NOT stored; use augmented().
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[float]):
        if not hasattr(values, "__len__"):
            # generator / iterator
            values = list(values)
        try:
            arr = np.array(values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Feature values must be numeric: {e}") from e

        if arr.ndim != 1:
            raise InvalidInputError(
                f"Feature vector must be one-dimensional, but found shape {arr.shape}"
            )
        if not np.all(np.isfinite(arr)):
            raise InvalidInputError(
                f"Feature vector contains non-finite values: {arr.tolist()}"
            )

        arr.setflags(write=False)
        self._values = arr

    @classmethod
    def validated(
        cls,
        values: "FeatureVector | Iterable[float]",
        n_features: Optional[int] = None,
    ) -> "FeatureVector":
        """
        Coerce + validate in one call.

        Dimension is checked before finiteness, so a wrong-length vector
        always fails with DimensionMismatchError.
        """
        if not isinstance(values, FeatureVector):
            if n_features is not None:
                found = len(values) if hasattr(values, "__len__") else None
                if found is not None and found != n_features:
                    raise DimensionMismatchError(n_features, found)
            values = cls(values)

        if n_features is not None and len(values) != n_features:
            raise DimensionMismatchError(n_features, len(values))
        return values

    @property
    def values(self) -> np.ndarray:
        return self._values

    def augmented(self) -> np.ndarray:
        """features + [1.0] (bias)"""
        return np.append(self._values, 1.0)

    def __len__(self) -> int:
        return self._values.shape[0]

    def __iter__(self) -> Iterator[float]:
        return iter(self._values.tolist())

    def __getitem__(self, i: int) -> float:
        return float(self._values[i])

    def __eq__(self, other) -> bool:
        if not isinstance(other, FeatureVector):
            return NotImplemented
        return np.array_equal(self._values, other._values)

    def __hash__(self) -> int:
        return hash(self._values.tobytes())

    def __repr__(self) -> str:
        return f"FeatureVector({self._values.tolist()})"
