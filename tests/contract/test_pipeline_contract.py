import json
import threading
from pathlib import Path

import pytest

from complementnets.training import pipelines


def _smoke_config(run_dir: Path) -> dict:
    config = pipelines.load_preset("color-smoke")
    config["train"]["run_dir"] = str(run_dir)
    config["train"]["colors"] = ["255,0,0", "10,200,30"]
    return config


def test_pipeline_produces_artifacts(tmp_path):
    config = _smoke_config(tmp_path / "run")
    result = pipelines.run_pipeline(config)

    run_dir = tmp_path / "run"
    assert result.steps == 10
    assert not result.cancelled
    assert result.final_cost is not None

    metrics = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [m["step"] for m in metrics] == [5, 10]
    assert all({"loss", "lr", "seed", "sha"} <= set(m) for m in metrics)
    assert metrics[-1]["loss"] == pytest.approx(result.final_cost)

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["steps"] == 10
    assert manifest["dataset"] == {"type": "synthetic", "count": 600, "seed": 0}
    assert manifest["model"]["layer_dims"] == [3, 64, 32, 16, 3]
    assert manifest["training"]["total_steps"] == 10
    assert manifest["training"]["lr_decay_every"] == 42
    assert manifest["outcome"] == {
        "steps": 10,
        "cancelled": False,
        "final_cost": pytest.approx(result.final_cost),
    }
    assert "numpy" in manifest["environment"]

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["reports"] == 2
    assert summary["cost"]["last_step"] == 10
    assert summary["cost"]["last"] == pytest.approx(result.final_cost)
    assert set(summary["eval"]) == {"mae", "rmse", "r2", "channel_mae", "loss"}

    swatches = json.loads((run_dir / "swatches.json").read_text())
    assert swatches["step"] == 10
    assert swatches["rows"][0]["complement"] == "rgb(0,255,255)"

    eval_metrics = json.loads((run_dir / "metrics_eval.json").read_text())
    assert {"mae", "rmse", "r2", "channel_mae", "loss"} <= set(eval_metrics)
    assert (run_dir / "metrics.csv").exists()
    assert (run_dir / "config.json").exists()


def test_pipeline_determinism(tmp_path):
    first = pipelines.run_pipeline(_smoke_config(tmp_path / "run1"))
    second = pipelines.run_pipeline(_smoke_config(tmp_path / "run2"))
    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()


def test_pipeline_cancellation(tmp_path):
    cancel = threading.Event()
    cancel.set()
    result = pipelines.run_pipeline(_smoke_config(tmp_path / "run"), cancel=cancel)
    assert result.cancelled
    assert result.steps == 1
    assert result.final_cost is None


def test_presets_include_shipped_variants():
    available = pipelines.presets()
    assert {"color-demo", "color-smoke", "color-legacy-graph", "color-eager-scalar-bias"} <= set(
        available
    )
    legacy = pipelines.load_preset("color-legacy-graph")
    assert legacy["model"]["init_fan"] == "out"
    assert pipelines.load_preset("color-eager-scalar-bias")["model"]["bias"] == "scalar"
    demo = pipelines.load_preset("color-demo")
    assert demo["train"]["steps"] == 500
    assert demo["data"]["options"]["count"] == 50_000


def test_unknown_preset():
    with pytest.raises(KeyError):
        pipelines.load_preset("mnist-flip-det")


def test_merge_and_load_config(tmp_path):
    override_path = tmp_path / "override.yaml"
    override_path.write_text("train:\n  steps: 3\n  lr: 0.05\n")
    override = pipelines.load_config(override_path)
    merged = pipelines.merge_config(pipelines.load_preset("color-smoke"), override)
    assert merged["train"]["steps"] == 3
    assert merged["train"]["lr"] == 0.05
    assert merged["train"]["batch_size"] == 50

    with pytest.raises(ValueError):
        pipelines.load_config(tmp_path / "config.toml")


def test_missing_sections_rejected():
    with pytest.raises(KeyError):
        pipelines.run_pipeline({"data": {"name": "complementary_colors"}})
