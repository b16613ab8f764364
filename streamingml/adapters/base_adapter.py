#!filepath: streamingml/adapters/base_adapter.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Sequence, Union

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from streamingml.observability.instrumentation import Instrumentation, NoOpInstrumentation
from streamingml.utils.errors import ConfigurationError

# stream definition: column -> dtype, or a DataFrame whose dtypes define it
StreamSchema = Union[pd.DataFrame, Mapping[str, Any]]


class BaseAdapter(ABC):
    """
    Adapter 的通用接口。

    - 持有 Instrumentation（可选）
    - 提供 timer() 方便在内部对关键区域计时
    - process(chunk) : 一批事件（DataFrame, 每行一个事件）-> 输出事件
    """

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    def timer(self, name: str = ''):
        """
        Adapter 内部计时：
            with adapter.timer():
                ...
        """
        if not name:
            name = self.__class__.__name__
        return self.inst.timer(name)

    @abstractmethod
    def process(self, chunk: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError


def schema_dtypes(schema: StreamSchema) -> Mapping[str, Any]:
    if isinstance(schema, pd.DataFrame):
        return dict(schema.dtypes)
    return {name: pd.api.types.pandas_dtype(dtype) for name, dtype in schema.items()}


def validate_features(schema: StreamSchema, features: Sequence[str]) -> List[str]:
    """
    model.features 必须是 stream 中的数值属性。
    """
    dtypes = schema_dtypes(schema)
    for name in features:
        if name not in dtypes:
            raise ConfigurationError(
                f"Feature [{name}] is not an attribute of the stream. "
                f"Available attributes: {list(dtypes)}"
            )
        dtype = dtypes[name]
        if is_bool_dtype(dtype) or not is_numeric_dtype(dtype):
            raise ConfigurationError(
                f"Feature [{name}] must be numeric, but found {dtype}"
            )
    return list(features)


def feature_matrix(chunk: pd.DataFrame, features: Sequence[str]) -> np.ndarray:
    missing = [f for f in features if f not in chunk.columns]
    if missing:
        raise ConfigurationError(f"Event chunk is missing feature attributes: {missing}")
    return chunk[list(features)].to_numpy(dtype=np.float64)
