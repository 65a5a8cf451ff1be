"""Command line entry point for complementary-color training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from complementnets.core.color import parse_color
from complementnets.training import pipelines


def _format_result(result) -> str:
    payload = {
        "steps": result.steps,
        "final_cost": result.final_cost,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    if result.cancelled:
        payload["cancelled"] = True
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="color-demo",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--steps", type=int, help="Total number of training steps")
    parser.add_argument("--samples", type=int, help="Number of generated training colors")
    parser.add_argument("--batch-size", type=int, help="Colors per mini-batch")
    parser.add_argument("--lr", type=float, help="Base learning rate")
    parser.add_argument("--seed", type=int, help="Seed used for data and initialisation")
    parser.add_argument("--run-dir", help="Directory receiving the run artifacts")
    parser.add_argument(
        "--color",
        action="append",
        dest="colors",
        metavar="R,G,B",
        help="Color row to visualise (repeatable)",
    )
    parser.add_argument("--enable-plots", action="store_true", help="Write loss and swatch PNGs")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = pipelines.load_preset(args.preset)
    if args.config:
        override = pipelines.load_config(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)
    config = json.loads(json.dumps(config))

    train_cfg = config.setdefault("train", {})
    data_opts = config.setdefault("data", {}).setdefault("options", {})
    if args.steps is not None:
        train_cfg["steps"] = int(args.steps)
    if args.batch_size is not None:
        train_cfg["batch_size"] = int(args.batch_size)
    if args.lr is not None:
        train_cfg["lr"] = float(args.lr)
    if args.samples is not None:
        data_opts["count"] = int(args.samples)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
        data_opts["seed"] = int(args.seed)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.colors:
        for text in args.colors:
            parse_color(text)
        train_cfg["colors"] = list(args.colors)
    if args.enable_plots:
        train_cfg["enable_plots"] = True

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
