#!filepath: streamingml/observability/instrumentation.py
from __future__ import annotations

import threading
import time
from typing import Dict

from streamingml import logs
from streamingml.observability.metrics import MetricRecorder


class Instrumentation:
    """
    Adapter 级计时 + 计数器。

    - timeline: name -> 累计秒数（同名累加，record=False 的外层 scope 不计入）
    - calls:    name -> 进入次数
    - 多个 adapter / 线程共享一个实例；热路径不打日志
    """

    enabled: bool

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.metrics = MetricRecorder(enabled=enabled)
        self.timeline: Dict[str, float] = {}
        self.calls: Dict[str, int] = {}
        self._lock = threading.Lock()

    def timer(self, name: str, *, record: bool = True) -> "_Timer":
        return _Timer(self, name, record and self.enabled)

    def _add(self, name: str, elapsed: float) -> None:
        with self._lock:
            self.timeline[name] = self.timeline.get(name, 0.0) + elapsed
            self.calls[name] = self.calls.get(name, 0) + 1

    def generate_timeline_report(self, title: str = "stream") -> None:
        if not self.enabled:
            return
        with self._lock:
            timeline = dict(self.timeline)
            calls = dict(self.calls)

        total = sum(timeline.values())
        lines = [f"Pipeline timeline [{title}] total={total:.4f}s"]
        for name, elapsed in timeline.items():
            share = elapsed / total * 100 if total > 0 else 0.0
            lines.append(
                f"  {name:<32} {elapsed:>10.4f}s {share:>6.1f}%  calls={calls.get(name, 0)}"
            )
        for name, value in self.metrics.metrics.items():
            lines.append(f"  [metric] {name} = {value}")
        logs.info("\n".join(lines))


class _Timer:
    __slots__ = ("inst", "name", "record", "start")

    def __init__(self, inst: Instrumentation, name: str, record: bool):
        self.inst = inst
        self.name = name
        self.record = record
        self.start = 0.0

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        # 异常路径也计时，异常继续向上抛
        if self.record:
            self.inst._add(self.name, time.perf_counter() - self.start)
        return False


class NoOpInstrumentation(Instrumentation):
    """observability 关闭时的占位实现"""

    def __init__(self):
        super().__init__(enabled=False)

    def generate_timeline_report(self, title: str = "stream") -> None:
        return None
