"""Core typing contracts for complementnets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np

Array = np.ndarray
RGB = Tuple[int, int, int]
Predictor = Callable[[Sequence[int]], RGB]


@dataclass(frozen=True)
class Batch:
    """A single mini-batch of data."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class ColorSample:
    """One normalised training pair."""

    input: Tuple[float, float, float]
    target: Tuple[float, float, float]


@dataclass
class LayerParameters:
    """Weights and bias of one fully-connected layer."""

    weights: Array
    bias: Array


@dataclass
class ActivationState:
    """Intermediate values captured during the forward pass."""

    layer_inputs: List[Array]
    pre_activations: List[Array]


Gradients = Dict[str, Array]


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_dims: List[int]
    bias: str
    init_fan: str


@dataclass
class TrainingState:
    """Mutable progress of a training session."""

    step: int
    learning_rate: float
    cost: float | None = None


@dataclass(frozen=True)
class StepResult:
    """What a single training step produced."""

    step: int
    learning_rate: float
    batches: int
    cost: float | None = None

    @property
    def reported(self) -> bool:
        return self.cost is not None


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`complementnets.training.pipelines.run_pipeline`."""

    steps: int
    final_cost: float | None
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    cancelled: bool = False
