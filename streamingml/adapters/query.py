# streamingml/adapters/query.py
from __future__ import annotations

from typing import Any, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from streamingml.utils.errors import ConfigurationError

Q = TypeVar("Q", bound="QueryConfig")


class QueryConfig(BaseModel):
    """
    Per-query parameters of an adapter (constant for the query's lifetime).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    model_name: str = Field(min_length=1)
    features: List[str] = Field(min_length=1)
    app_name: Optional[str] = None

    @field_validator("features")
    @classmethod
    def _unique_features(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"duplicate feature attributes: {v}")
        return v

    @classmethod
    def parse(cls: Type[Q], params: Union[Q, Mapping[str, Any]]) -> Q:
        """
        dict / QueryConfig -> QueryConfig
        pydantic.ValidationError -> ConfigurationError
        """
        if isinstance(params, cls):
            return params
        try:
            return cls.model_validate(dict(params))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid parameters for {cls.__name__}: {e}") from e


class PredictQuery(QueryConfig):
    prediction_samples: int = Field(default=1000, gt=0, strict=True)


class UpdateQuery(QueryConfig):
    target: str = Field(min_length=1)
    on_invalid: Literal["raise", "skip"] = "raise"
