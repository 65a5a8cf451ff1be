"""Metric sinks fed by the trainer on reporting steps."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping, TextIO

from .artifacts import git_sha


class JsonlSink:
    """Append-only JSONL writer for metrics."""

    def __init__(
        self,
        path: str | Path,
        *,
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed
        self.sha = sha or git_sha()

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        record = {"step": int(step), "seed": self.seed, "sha": self.sha}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_step


class CsvSink:
    """Write metrics to CSV with a stable schema."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        row = {"step": int(step)}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


class ConsoleSink:
    """Print ``step <n> cost <value>`` on every reporting step."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        print("step", int(step), "cost", float(metrics.get("loss", float("nan"))), file=self.stream)

    def on_train_end(self, result) -> None:
        if result.failed:
            print("Training failed.", file=self.stream)
            return
        state = "cancelled" if result.cancelled else "done"
        print(f"Training is {state}.", file=self.stream)
