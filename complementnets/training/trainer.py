"""Feed-forward regression model and the per-step training loop."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Mapping, Protocol, Sequence

import numpy as np

from ..core.activations import clamp_unit, clamped_relu_deriv, relu, relu_deriv
from ..core.color import denormalize_array, denormalize_color, normalize_color
from ..core.errors import InvalidArgument, NumericInstability, ShapeMismatch
from ..core.types import (
    RGB,
    ActivationState,
    Array,
    Batch,
    Gradients,
    LayerParameters,
    ModelDescription,
    Predictor,
    StepResult,
    TrainingState,
)
from ..data.colors import ColorDataset
from ..data.utils import require_positive
from .losses import mean_squared_error
from .schedules import learning_rate

DEFAULT_LAYER_DIMS = (3, 64, 32, 16, 3)
BIAS_MODES = {"vector", "scalar"}
INIT_FANS = {"in", "out"}


@dataclass(eq=False)
class RegressionModel:
    """Fully-connected ReLU network whose output is clamped to ``[0, 1]``.

    ``bias="vector"`` gives each layer a zero ``[1, width]`` bias,
    ``bias="scalar"`` a single zero scalar. ``init_fan`` picks which layer
    width scales the He initialisation ``sqrt(2 / fan)``.
    """

    layer_dims: Sequence[int] = DEFAULT_LAYER_DIMS
    seed: int = 0
    bias: str = "vector"
    init_fan: str = "in"
    layers: List[LayerParameters] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        dims = [int(d) for d in self.layer_dims]
        if len(dims) < 2 or any(d <= 0 for d in dims):
            raise InvalidArgument(f"layer_dims must hold at least two positive widths: {dims}")
        if self.bias not in BIAS_MODES:
            raise InvalidArgument(f"Unknown bias mode: {self.bias}")
        if self.init_fan not in INIT_FANS:
            raise InvalidArgument(f"Unknown init_fan: {self.init_fan}")
        self.layer_dims = tuple(dims)
        self.reset(self.seed)

    def describe(self) -> ModelDescription:
        return ModelDescription(
            layer_dims=list(self.layer_dims), bias=self.bias, init_fan=self.init_fan
        )

    def reset(self, seed: int) -> None:
        rng = np.random.default_rng(seed)
        layers: list[LayerParameters] = []
        dims = list(self.layer_dims)
        for in_dim, out_dim in zip(dims[:-1], dims[1:]):
            fan = in_dim if self.init_fan == "in" else out_dim
            W = rng.standard_normal((in_dim, out_dim)) * np.sqrt(2.0 / fan)
            if self.bias == "vector":
                b = np.zeros((1, out_dim))
            else:
                b = np.zeros(())
            layers.append(LayerParameters(weights=W, bias=b))
        self.layers = layers

    # ------------------------------------------------------------------
    # Forward / backward

    def _check_inputs(self, inputs: Array) -> Array:
        inputs = np.asarray(inputs, dtype=np.float64)
        if inputs.ndim != 2:
            raise ShapeMismatch(f"inputs must be 2-D [batch, features], got shape {inputs.shape}")
        if inputs.shape[1] != self.layer_dims[0]:
            raise ShapeMismatch(
                f"inputs have {inputs.shape[1]} features but the first layer expects "
                f"{self.layer_dims[0]}"
            )
        if inputs.shape[0] == 0:
            raise InvalidArgument("empty batch")
        return inputs

    def _forward(self, inputs: Array) -> tuple[Array, ActivationState]:
        x = self._check_inputs(inputs)
        layer_inputs: list[Array] = []
        pre_activations: list[Array] = []
        for layer in self.layers:
            layer_inputs.append(x)
            z = x @ layer.weights + layer.bias
            pre_activations.append(z)
            x = relu(z)
        state = ActivationState(layer_inputs=layer_inputs, pre_activations=pre_activations)
        return clamp_unit(x), state

    def forward(self, inputs: Array) -> Array:
        outputs, _ = self._forward(inputs)
        return outputs

    def loss(self, prediction: Array, target: Array) -> float:
        value, _ = mean_squared_error(np.asarray(prediction), np.asarray(target))
        return value

    def gradients(self, batch: Batch) -> tuple[float, Gradients]:
        """Return the batch cost and dCost/dParam for every layer."""

        outputs, state = self._forward(batch.inputs)
        targets = np.asarray(batch.targets, dtype=np.float64)
        cost, d_out = mean_squared_error(outputs, targets)

        grads: Gradients = {}
        last_idx = len(self.layers) - 1
        delta = d_out * clamped_relu_deriv(state.pre_activations[last_idx])
        for idx in reversed(range(len(self.layers))):
            layer = self.layers[idx]
            grads[f"W{idx}"] = state.layer_inputs[idx].T @ delta
            if self.bias == "vector":
                grads[f"b{idx}"] = delta.sum(axis=0, keepdims=True)
            else:
                grads[f"b{idx}"] = np.asarray(delta.sum())
            if idx > 0:
                delta = (delta @ layer.weights.T) * relu_deriv(state.pre_activations[idx - 1])
        return cost, grads

    def apply_gradients(self, grads: Gradients, learning_rate: float) -> None:
        for idx, layer in enumerate(self.layers):
            layer.weights -= learning_rate * grads[f"W{idx}"]
            layer.bias -= learning_rate * grads[f"b{idx}"]

    def train_step(
        self, batch: Batch, learning_rate: float, compute_cost: bool = True
    ) -> float | None:
        """One gradient-descent update against ``batch``."""

        cost, grads = self.gradients(batch)
        self.apply_gradients(grads, learning_rate)
        return cost if compute_cost else None

    # ------------------------------------------------------------------
    # Color helpers

    def predict_rgb(self, rgb: Sequence[int]) -> RGB:
        outputs = self.forward(np.array([normalize_color(rgb)]))
        return denormalize_color(outputs[0])

    def predict_colors(self, colors: Sequence[Sequence[int]]) -> Array:
        inputs = np.array([normalize_color(c) for c in colors], dtype=np.float64)
        return denormalize_array(self.forward(inputs))

    # ------------------------------------------------------------------

    def parameters(self) -> Mapping[str, Array]:
        params: dict[str, Array] = {}
        for idx, layer in enumerate(self.layers):
            params[f"W{idx}"] = layer.weights
            params[f"b{idx}"] = layer.bias
        return params

    def is_finite(self) -> bool:
        return all(bool(np.all(np.isfinite(p))) for p in self.parameters().values())

    def parameter_count(self) -> int:
        return int(sum(int(p.size) for p in self.parameters().values()))


@dataclass(frozen=True)
class TrainingConfig:
    """Hyper-parameters of a training session."""

    learning_rate: float = 0.1
    lr_decay: float = 0.85
    lr_decay_every: int = 42
    batch_size: int = 50
    total_steps: int = 500
    report_every: int = 5
    check_finite: bool = True

    def __post_init__(self) -> None:
        require_positive("batch_size", self.batch_size)
        require_positive("total_steps", self.total_steps)
        require_positive("report_every", self.report_every)
        require_positive("lr_decay_every", self.lr_decay_every)
        if not self.learning_rate > 0:
            raise InvalidArgument("learning_rate must be positive")

    @classmethod
    def from_mapping(cls, train_cfg: Mapping[str, object]) -> "TrainingConfig":
        return cls(
            learning_rate=float(train_cfg.get("lr", 0.1)),
            lr_decay=float(train_cfg.get("lr_decay", 0.85)),
            lr_decay_every=int(train_cfg.get("lr_decay_every", 42)),
            batch_size=int(train_cfg.get("batch_size", 50)),
            total_steps=int(train_cfg.get("steps", 500)),
            report_every=int(train_cfg.get("report_every", 5)),
            check_finite=bool(train_cfg.get("check_finite", True)),
        )

    def rate(self, step: int) -> float:
        return learning_rate(
            self.learning_rate, step, decay=self.lr_decay, every=self.lr_decay_every
        )


class TrainerState(enum.Enum):
    IDLE = "idle"
    STEPPING = "stepping"
    REPORTING = "reporting"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


_TERMINAL_STATES = {TrainerState.DONE, TrainerState.CANCELLED, TrainerState.FAILED}


class CancellationToken(Protocol):
    def is_set(self) -> bool:
        ...


@dataclass(frozen=True)
class TrainingResult:
    steps: int
    costs: List[tuple[int, float]]
    cancelled: bool = False
    failed: bool = False

    @property
    def final_cost(self) -> float | None:
        return self.costs[-1][1] if self.costs else None


class Trainer:
    """Run steps over a fixed dataset, reporting the cost every N steps.

    Callbacks are duck-typed: ``on_step(step, metrics)`` receives the cost
    and learning rate on reporting steps, ``on_report(step, predict)``
    receives a function mapping an RGB triple to the predicted complement,
    and ``on_train_end(result)`` runs once when the session ends.
    """

    def __init__(
        self,
        model: RegressionModel,
        dataset: ColorDataset,
        config: TrainingConfig | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.model = model
        self.dataset = dataset
        self.config = config or TrainingConfig()
        self.callbacks = list(callbacks or [])
        if len(dataset) < self.config.batch_size:
            raise InvalidArgument(
                f"dataset of {len(dataset)} samples is smaller than one batch "
                f"of {self.config.batch_size}"
            )
        self.status = TrainerState.IDLE
        self.state = TrainingState(step=0, learning_rate=self.config.rate(0))
        self._costs: list[tuple[int, float]] = []

    # ------------------------------------------------------------------
    # Public driving API

    def iter_steps(self) -> Iterator[StepResult]:
        """Yield after every step so the caller decides when the next one runs."""

        if self.status in _TERMINAL_STATES:
            raise RuntimeError(f"training session already {self.status.value}")
        if self.status is not TrainerState.IDLE:
            raise RuntimeError("training session is already running")
        self.status = TrainerState.STEPPING
        try:
            self._emit_report(0)
            for step in range(1, self.config.total_steps + 1):
                yield self.train_one_step(step)
        except Exception:
            self.status = TrainerState.FAILED
            raise
        self.status = TrainerState.DONE

    def run(self, cancel: CancellationToken | None = None) -> TrainingResult:
        steps = self.iter_steps()
        try:
            for result in steps:
                if self._should_cancel(cancel, result):
                    steps.close()
                    self.status = TrainerState.CANCELLED
                    break
        except Exception:
            self._finish_failed()
            raise
        return self._finish()

    async def run_async(self, cancel: CancellationToken | None = None) -> TrainingResult:
        """Like :meth:`run` but hands control to the event loop between steps."""

        steps = self.iter_steps()
        try:
            for result in steps:
                await asyncio.sleep(0)
                if self._should_cancel(cancel, result):
                    steps.close()
                    self.status = TrainerState.CANCELLED
                    break
        except Exception:
            self._finish_failed()
            raise
        return self._finish()

    def train_one_step(self, step: int) -> StepResult:
        """One pass over the dataset in contiguous batches."""

        rate = self.config.rate(step)
        reporting = step % self.config.report_every == 0
        batch_costs: list[float] = []
        batches = 0
        for batch in self.dataset.batches(self.config.batch_size):
            cost = self.model.train_step(batch, rate, compute_cost=reporting)
            if cost is not None:
                batch_costs.append(cost)
            batches += 1

        if self.config.check_finite and not self.model.is_finite():
            raise NumericInstability(f"non-finite parameters after step {step}")

        mean_cost: float | None = None
        if reporting:
            mean_cost = float(np.mean(batch_costs))
            if self.config.check_finite and not np.isfinite(mean_cost):
                raise NumericInstability(f"non-finite cost {mean_cost} at step {step}")

        self.state = TrainingState(step=step, learning_rate=rate, cost=mean_cost)
        if mean_cost is not None:
            self.status = TrainerState.REPORTING
            self._costs.append((step, mean_cost))
            self._emit_metrics(step, {"loss": mean_cost, "lr": rate})
            self._emit_report(step)
            self.status = TrainerState.STEPPING
        return StepResult(step=step, learning_rate=rate, batches=batches, cost=mean_cost)

    # ------------------------------------------------------------------
    # Internal helpers

    def _should_cancel(self, cancel: CancellationToken | None, result: StepResult) -> bool:
        # A session that already ran its last step is done, not cancelled.
        if cancel is None or result.step >= self.config.total_steps:
            return False
        return bool(cancel.is_set())

    def _finish_failed(self) -> None:
        # Sinks still flush on a failed session; the original error propagates.
        if self.status is TrainerState.FAILED:
            self._finish()

    def _finish(self) -> TrainingResult:
        result = TrainingResult(
            steps=self.state.step,
            costs=list(self._costs),
            cancelled=self.status is TrainerState.CANCELLED,
            failed=self.status is TrainerState.FAILED,
        )
        for callback in self.callbacks:
            if hasattr(callback, "on_train_end"):
                callback.on_train_end(result)  # type: ignore[attr-defined]
        return result

    def _emit_metrics(self, step: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(step, metrics)  # type: ignore[attr-defined]

    def _emit_report(self, step: int) -> None:
        predict: Predictor = self.model.predict_rgb
        for callback in self.callbacks:
            if hasattr(callback, "on_report"):
                callback.on_report(step, predict)  # type: ignore[attr-defined]


__all__ = [
    "CancellationToken",
    "DEFAULT_LAYER_DIMS",
    "RegressionModel",
    "Trainer",
    "TrainerState",
    "TrainingConfig",
    "TrainingResult",
]
