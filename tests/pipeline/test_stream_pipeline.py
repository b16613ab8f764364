#!filepath: tests/pipeline/test_stream_pipeline.py
from __future__ import annotations

import pandas as pd

from streamingml.adapters.base_adapter import BaseAdapter
from streamingml.adapters.predict_adapter import PredictAdapter
from streamingml.adapters.update_adapter import UpdateAdapter
from streamingml.observability.instrumentation import Instrumentation
from streamingml.pipeline.pipeline import StreamPipeline


class _Tag(BaseAdapter):
    def __init__(self, tag):
        super().__init__()
        self.tag = tag

    def process(self, chunk):
        out = chunk.copy()
        prev = out["trail"] if "trail" in out.columns else ""
        out["trail"] = prev + self.tag
        return out


def test_adapters_run_in_order():
    pipeline = StreamPipeline([_Tag("a"), _Tag("b"), _Tag("c")])

    out = pipeline.process(pd.DataFrame({"x": [1, 2]}))

    assert out["trail"].tolist() == ["abc", "abc"]


def test_run_is_lazy():
    seen = []

    def chunks():
        for i in range(3):
            seen.append(i)
            yield pd.DataFrame({"x": [i]})

    it = StreamPipeline([_Tag("a")]).run(chunks())
    assert seen == []

    next(it)
    assert seen == [0]


def test_update_then_predict_stream(registry):
    inst = Instrumentation(enabled=True)
    train = pd.DataFrame(
        {
            "x0": [1.0, 0.0, 1.0] * 40,
            "x1": [0.0, 1.0, 0.0] * 40,
            "y": ["up", "down", "up"] * 40,
        }
    )
    chunks = [train.iloc[i:i + 30] for i in range(0, len(train), 30)]

    updater = UpdateAdapter(
        {"model_name": "m", "target": "y", "features": ["x0", "x1"]},
        train,
        registry=registry,
        inst=inst,
    )
    outs = list(StreamPipeline([updater], inst, name="update").run(chunks))

    assert len(outs) == 4
    assert registry.require("m").n_updates == len(train)

    events = pd.DataFrame({"x0": [1.0, 0.0], "x1": [0.0, 1.0]})
    predictor = PredictAdapter(
        {"model_name": "m", "features": ["x0", "x1"], "prediction_samples": 300},
        events,
        registry=registry,
        inst=inst,
    )
    (result,) = StreamPipeline([predictor], inst, name="predict").run([events])

    assert result["prediction"].tolist() == ["up", "down"]
    assert set(inst.timeline) == {"UpdateAdapter", "PredictAdapter"}
    assert inst.metrics.metrics["m.predicted"] == 2
