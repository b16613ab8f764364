#!filepath: streamingml/bayesian/registry.py
from __future__ import annotations

import threading
from typing import Dict, List, Optional

from streamingml import logs
from streamingml.bayesian.softmax_regression import SoftmaxRegression
from streamingml.config.classifier_config import ClassifierConfig
from streamingml.utils.errors import ModelNotInitializedError


class ModelRegistry:
    """
    ModelRegistry (FINAL / FROZEN)

    name -> SoftmaxRegression, shared by every adapter that
    references the same name.

    - get():           lock-free lookup, never creates
    - get_or_create(): double-checked insert, first writer wins
    - structural changes (insert / remove / clear) take one short lock
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config if config is not None else ClassifierConfig()
        self._models: Dict[str, SoftmaxRegression] = {}
        self._lock = threading.Lock()

    # --------------------------------------------------
    # Lookup
    # --------------------------------------------------
    def get(self, name: str) -> Optional[SoftmaxRegression]:
        return self._models.get(name)

    def require(self, name: str) -> SoftmaxRegression:
        model = self._models.get(name)
        if model is None:
            raise ModelNotInitializedError(
                f"Model [{name}] needs to be initialized prior to be used for prediction. "
                f"Perform an update on it first."
            )
        return model

    def get_or_create(
        self,
        name: str,
        n_features: int,
        config: Optional[ClassifierConfig] = None,
    ) -> SoftmaxRegression:
        """
        Existing model is returned as-is, even when n_features differs;
        the caller validates the count.
        """
        model = self._models.get(name)
        if model is not None:
            return model

        with self._lock:
            model = self._models.get(name)
            if model is None:
                model = SoftmaxRegression(
                    name,
                    n_features,
                    config if config is not None else self.config,
                )
                self._models[name] = model
                logs.info(
                    f"[ModelRegistry] created model={name} n_features={n_features} "
                    f"posterior={model.config.posterior}"
                )
        return model

    # --------------------------------------------------
    # Host-owned teardown
    # --------------------------------------------------
    def remove(self, name: str) -> Optional[SoftmaxRegression]:
        with self._lock:
            model = self._models.pop(name, None)
        if model is not None:
            logs.info(f"[ModelRegistry] removed model={name}")
        return model

    def clear(self) -> None:
        with self._lock:
            self._models.clear()

    def names(self) -> List[str]:
        with self._lock:
            return list(self._models.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)


def qualify_model_name(name: str, app_name: Optional[str] = None) -> str:
    """
    model name = user given name + "." + app name
    """
    if not app_name:
        return name
    return f"{name}.{app_name}"


# 进程级默认 registry（adapter 可显式注入其他实例）
model_registry = ModelRegistry()
