# streamingml/config/classifier_config.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class ClassifierConfig(BaseModel):
    """
    ClassifierConfig

    Defaults applied to every model created by the registry.
    Frozen: a model keeps the config it was created with.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    # prediction
    prediction_samples: PositiveInt = 1000
    confidence_metric: Literal["mean", "std", "vote"] = "mean"

    # posterior family
    posterior: Literal["laplace", "variational"] = "laplace"
    prior_variance: float = Field(default=10.0, gt=0)

    # variational only
    learning_rate: float = Field(default=0.05, gt=0)
    optimizer: Literal["sgd", "adam", "adagrad"] = "adam"
    model_samples: PositiveInt = 1

    # sampling
    seed: Optional[int] = None
