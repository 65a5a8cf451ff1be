"""complementnets public API."""

from .core import activations, color, errors, types  # noqa: F401
from .core.color import complement, parse_color
from .data import ColorDataset, generate_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.schedules import learning_rate
from .training.trainer import RegressionModel, Trainer, TrainingConfig

__all__ = [
    "ColorDataset",
    "RegressionModel",
    "Trainer",
    "TrainingConfig",
    "activations",
    "color",
    "complement",
    "errors",
    "generate_dataset",
    "learning_rate",
    "load_preset",
    "parse_color",
    "presets",
    "run_pipeline",
    "types",
]
