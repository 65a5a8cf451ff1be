"""Pipeline assembly for complementary-color training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import yaml

from ..core.types import RunResult
from ..data import registry
from ..data.colors import generate_dataset
from ..data.utils import seed_everything
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ConsoleSink, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from ..reporting.swatches import DEFAULT_COLORS, SwatchTable
from .metrics import DEFAULT_METRICS, compute_metrics
from .trainer import CancellationToken, RegressionModel, Trainer, TrainingConfig

_PRESETS: Dict[str, Mapping[str, object]] = {
    "color-demo": {
        "data": {
            "name": "complementary_colors",
            "options": {"count": 50_000, "seed": 0},
        },
        "model": {"hidden": [64, 32, 16], "bias": "vector", "init_fan": "in"},
        "train": {
            "steps": 500,
            "batch_size": 50,
            "lr": 0.1,
            "lr_decay": 0.85,
            "lr_decay_every": 42,
            "report_every": 5,
            "seed": 0,
            "eval_count": 1000,
            "run_dir": "runs/color-demo",
            "enable_plots": False,
        },
    },
    "color-smoke": {
        "data": {
            "name": "complementary_colors",
            "options": {"count": 600, "seed": 0},
        },
        "model": {"hidden": [64, 32, 16], "bias": "vector", "init_fan": "in"},
        "train": {
            "steps": 10,
            "batch_size": 50,
            "lr": 0.1,
            "report_every": 5,
            "seed": 0,
            "eval_count": 100,
            "run_dir": "runs/color-smoke",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[1] / "presets"
_REQUIRED_SECTIONS = {"data", "model", "train"}


def load_config(path: str | Path) -> Mapping[str, object]:
    """Read a JSON or YAML config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    if not _PRESET_DIR.exists():
        return presets
    for file in sorted(_PRESET_DIR.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = load_config(file)
        missing = _REQUIRED_SECTIONS - set(data)
        if missing:
            missing_str = ", ".join(sorted(missing))
            raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
        presets[file.stem] = json.loads(json.dumps(data))
    return presets


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    try:
        return available[name]
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> dict:
    """Recursively overlay ``override`` on a copy of ``base``."""

    merged = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def build_model(model_cfg: Mapping[str, object], seed: int) -> RegressionModel:
    dims = [3, *(int(h) for h in model_cfg.get("hidden", [64, 32, 16])), 3]
    return RegressionModel(
        layer_dims=dims,
        seed=seed,
        bias=str(model_cfg.get("bias", "vector")),
        init_fan=str(model_cfg.get("init_fan", "in")),
    )


def run_pipeline(
    config: Mapping[str, object],
    *,
    cancel: CancellationToken | None = None,
    callbacks: Sequence[object] = (),
) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    seed = int(train_cfg.get("seed", 0))
    seed_everything(seed)
    training_config = TrainingConfig.from_mapping(train_cfg)
    dataset_spec = registry.get_dataset(str(data_cfg["name"]), **data_cfg.get("options", {}))
    model = build_model(model_cfg, seed)

    run_dir = _resolve_run_dir(train_cfg)
    run_dir.mkdir(parents=True, exist_ok=True)
    enable_plots = bool(train_cfg.get("enable_plots", False))

    _print_startup_summary(
        dataset_name=dataset_spec.name,
        samples=dataset_spec.size,
        batches=dataset_spec.dataset.num_batches(training_config.batch_size),
        dims=list(model.layer_dims),
        config=training_config,
        param_count=model.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    sinks: List[object] = [
        ConsoleSink(),
        jsonl,
        CsvSink(run_dir / "metrics.csv"),
        PlotAdapter(run_dir, enable_plots=enable_plots),
        SwatchTable(
            train_cfg.get("colors", DEFAULT_COLORS),
            run_dir=run_dir,
            enable_plots=enable_plots,
        ),
    ]
    trainer = Trainer(
        model=model,
        dataset=dataset_spec.dataset,
        config=training_config,
        callbacks=[*sinks, *callbacks],
    )
    result = trainer.run(cancel=cancel)

    eval_metrics: Dict[str, float] = {}
    eval_count = int(train_cfg.get("eval_count", 0))
    if eval_count > 0:
        held_out = generate_dataset(eval_count, seed=seed + 1)
        predictions = model.forward(held_out.inputs)
        eval_metrics.update(compute_metrics(DEFAULT_METRICS, predictions, held_out.targets))
        eval_metrics["loss"] = model.loss(predictions, held_out.targets)
        (run_dir / "metrics_eval.json").write_text(json.dumps(eval_metrics, indent=2))

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset_spec.provenance,
        model={**asdict(model.describe()), "parameters": model.parameter_count()},
        training=asdict(training_config),
        outcome={
            "steps": result.steps,
            "cancelled": result.cancelled,
            "final_cost": result.final_cost,
        },
    )
    summary_path = write_summary(
        jsonl.path,
        run_dir / "summary.json",
        tail=int(train_cfg.get("summary_tail", 10)),
        eval_metrics=eval_metrics,
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        steps=result.steps,
        final_cost=result.final_cost,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        cancelled=result.cancelled,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object]) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp


def _print_startup_summary(
    *,
    dataset_name: str,
    samples: int,
    batches: int,
    dims: Sequence[int],
    config: TrainingConfig,
    param_count: int,
) -> None:
    print("=== complementnets run ===")
    print(f"Dataset       : {dataset_name} ({samples} samples)")
    print(f"Dimensions    : {list(dims)}")
    print(f"Batches/step  : {batches} x {config.batch_size}")
    print(f"Steps         : {config.total_steps} (report every {config.report_every})")
    print(
        f"Learning rate : {config.learning_rate} x {config.lr_decay}"
        f" every {config.lr_decay_every} steps"
    )
    print(f"Parameters    : {param_count}")
    print("==========================")


__all__ = [
    "build_model",
    "load_config",
    "load_preset",
    "merge_config",
    "presets",
    "run_pipeline",
]
