#!filepath: streamingml/cli.py
from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from streamingml import AppConfig, __version__, init_logging
from streamingml.adapters.predict_adapter import PredictAdapter
from streamingml.adapters.update_adapter import UpdateAdapter
from streamingml.bayesian.registry import ModelRegistry
from streamingml.observability.instrumentation import Instrumentation
from streamingml.pipeline.pipeline import StreamPipeline
from streamingml.utils.errors import StreamingMLError

app = typer.Typer(help="Streaming Bayesian Softmax Classifier CLI")


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def replay(
    train: Path = typer.Argument(..., exists=True, help="Labeled events (CSV)"),
    predict: Path = typer.Argument(..., exists=True, help="Unlabeled events (CSV)"),
    target: str = typer.Option(..., help="Label attribute of the training stream"),
    features: str = typer.Option(..., help="Comma-separated feature attributes"),
    model: str = typer.Option("model", help="Model name"),
    samples: Optional[int] = typer.Option(None, help="Prediction samples (default from config)"),
    chunk_size: int = typer.Option(1000, help="Events per chunk"),
    output: Optional[Path] = typer.Option(None, help="Write predictions to this CSV"),
    config: Optional[Path] = typer.Option(None, help="YAML config (default: bundled base.yml)"),
):
    """
    按 chunk 回放训练流（update）再回放预测流（predict）
    """
    cfg = AppConfig.load(str(config) if config else None)
    init_logging(cfg.log)

    registry = ModelRegistry(cfg.classifier)
    inst = Instrumentation(enabled=True)
    feature_list = [f.strip() for f in features.split(",") if f.strip()]
    n_samples = samples if samples is not None else cfg.classifier.prediction_samples

    try:
        updater = UpdateAdapter(
            {"model_name": model, "target": target, "features": feature_list},
            pd.read_csv(train, nrows=chunk_size),
            registry=registry,
            inst=inst,
        )
        for _ in StreamPipeline([updater], inst, name="update").run(
            pd.read_csv(train, chunksize=chunk_size)
        ):
            pass

        predictor = PredictAdapter(
            {"model_name": model, "features": feature_list, "prediction_samples": n_samples},
            pd.read_csv(predict, nrows=chunk_size),
            registry=registry,
            inst=inst,
        )
        chunks = list(
            StreamPipeline([predictor], inst, name="predict").run(
                pd.read_csv(predict, chunksize=chunk_size)
            )
        )
    except StreamingMLError as e:
        print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    result = pd.concat(chunks, ignore_index=True) if chunks else pd.DataFrame()

    if output is not None:
        result.to_csv(output, index=False)
        print(f"[green]Wrote {len(result)} predictions to {output}[/green]")
        return

    table = Table(title=escape(f"Predictions [{model}]"))
    for col in result.columns:
        table.add_column(str(col))
    for row in result.itertuples(index=False):
        table.add_row(*(str(v) for v in row))
    print(table)


if __name__ == "__main__":
    app()
