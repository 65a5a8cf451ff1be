"""Run summary built from the reported cost curve and held-out metrics."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence, Tuple

import numpy as np

CostPoint = Tuple[int, float]


def cost_curve_area(points: Sequence[CostPoint]) -> float:
    """Trapezoidal area under the cost curve, measured in training steps.

    The x axis is the step number, so runs reporting at different cadences
    stay comparable.
    """

    if len(points) < 2:
        return 0.0
    steps = np.asarray([p[0] for p in points], dtype=np.float64)
    costs = np.asarray([p[1] for p in points], dtype=np.float64)
    widths = np.diff(steps)
    return float(np.sum(widths * (costs[1:] + costs[:-1]) / 2.0))


def read_cost_curve(metrics_jsonl: str | Path) -> list[CostPoint]:
    path = Path(metrics_jsonl)
    if not path.exists():
        return []
    points: list[CostPoint] = []
    for line in path.read_text().splitlines():
        if not line.strip():
            continue
        record = json.loads(line)
        if "loss" in record:
            points.append((int(record["step"]), float(record["loss"])))
    return points


def build_summary(
    points: Sequence[CostPoint],
    *,
    tail: int = 10,
    eval_metrics: Mapping[str, float] | None = None,
) -> dict:
    """Condense reported ``(step, cost)`` pairs into a comparable summary.

    ``improvement`` is the relative drop from the first to the last reported
    cost; ``tail_mean`` averages the last ``tail`` reports, which smooths the
    step-to-step noise of SGD when runs are compared.
    """

    summary: dict = {"version": 2, "reports": len(points)}
    if points:
        costs = np.asarray([p[1] for p in points], dtype=np.float64)
        best = int(np.argmin(costs))
        window = max(1, min(tail, len(points)))
        first, last = float(costs[0]), float(costs[-1])
        summary["cost"] = {
            "first": first,
            "last": last,
            "last_step": int(points[-1][0]),
            "best": float(costs[best]),
            "best_step": int(points[best][0]),
            "tail_mean": float(np.mean(costs[-window:])),
            "tail_window": window,
            "improvement": (first - last) / first if first > 0 else 0.0,
            "area": cost_curve_area(points),
        }
    if eval_metrics:
        summary["eval"] = {k: float(v) for k, v in sorted(eval_metrics.items())}
    return summary


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    tail: int = 10,
    eval_metrics: Mapping[str, float] | None = None,
) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = build_summary(
        read_cost_curve(metrics_jsonl), tail=tail, eval_metrics=eval_metrics
    )
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["build_summary", "cost_curve_area", "read_cost_curve", "write_summary"]
