#!filepath: streamingml/observability/metrics.py
import threading
from dataclasses import dataclass, field
from typing import Dict, Any

from streamingml import logs


@dataclass
class MetricRecorder:
    enabled: bool = True
    metrics: Dict[str, Any] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, name: str, value: Any):
        if not self.enabled:
            return
        with self._lock:
            self.metrics[name] = value
        logs.debug(f"[Metric] {name} = {value}")

    def increment(self, name: str, value: float = 1):
        """计数器（多线程安全）"""
        if not self.enabled:
            return
        with self._lock:
            self.metrics[name] = self.metrics.get(name, 0) + value
