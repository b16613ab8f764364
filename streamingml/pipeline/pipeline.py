#!filepath: streamingml/pipeline/pipeline.py
from __future__ import annotations

from typing import Iterable, Iterator, List

import pandas as pd

from streamingml import logs
from streamingml.adapters.base_adapter import BaseAdapter
from streamingml.observability.instrumentation import Instrumentation


class StreamPipeline:
    """
    StreamPipeline = 调度器（Scheduler）

    设计铁律：
    - Pipeline 负责 orchestration（adapter 顺序）
    - Pipeline 不负责 adapter 级计时（adapter 自己 timer）
    - 每个 chunk 依次流过所有 adapter
    """

    def __init__(
            self,
            adapters: List[BaseAdapter],
            inst: Instrumentation | None = None,
            name: str = "stream",
    ):
        self.adapters = adapters
        self.inst = inst if inst is not None else Instrumentation(enabled=False)
        self.name = name

    def process(self, chunk: pd.DataFrame) -> pd.DataFrame:
        for adapter in self.adapters:
            chunk = adapter.process(chunk)
        return chunk

    def run(self, chunks: Iterable[pd.DataFrame]) -> Iterator[pd.DataFrame]:
        logs.info(f"[Pipeline] ====== START {self.name} ======")

        n_chunks = 0
        for chunk in chunks:
            n_chunks += 1
            yield self.process(chunk)

        logs.info(f"[Pipeline] ====== DONE {self.name} chunks={n_chunks} ======")
        self.inst.generate_timeline_report(self.name)
