"""Synthetic complementary-color training data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from ..core.color import complement
from ..core.errors import ShapeMismatch
from ..core.types import Array, Batch, ColorSample
from .utils import contiguous_batches, count_batches, require_positive


@dataclass(frozen=True, eq=False)
class ColorDataset:
    """Read-only, eagerly materialised set of normalised color pairs."""

    inputs: Array
    targets: Array

    def __post_init__(self) -> None:
        inputs = np.array(self.inputs, dtype=np.float64)
        targets = np.array(self.targets, dtype=np.float64)
        if inputs.ndim != 2 or inputs.shape[1] != 3:
            raise ShapeMismatch(f"inputs must have shape [N, 3], got {inputs.shape}")
        if targets.shape != inputs.shape:
            raise ShapeMismatch(
                f"targets shape {targets.shape} does not match inputs {inputs.shape}"
            )
        inputs.setflags(write=False)
        targets.setflags(write=False)
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(self, "targets", targets)

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def __getitem__(self, index: int) -> ColorSample:
        r, g, b = (float(v) for v in self.inputs[index])
        tr, tg, tb = (float(v) for v in self.targets[index])
        return ColorSample(input=(r, g, b), target=(tr, tg, tb))

    def batches(self, batch_size: int) -> Iterator[Batch]:
        return contiguous_batches(self.inputs, self.targets, batch_size)

    def num_batches(self, batch_size: int) -> int:
        return count_batches(len(self), batch_size)


def generate_dataset(
    count: int,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> ColorDataset:
    """Draw ``count`` random colors and pair them with their complements."""

    count = require_positive("count", count)
    rng = rng if rng is not None else np.random.default_rng(seed)
    raw = rng.integers(0, 256, size=(count, 3))
    targets = np.array([complement(tuple(int(c) for c in row)) for row in raw])
    return ColorDataset(inputs=raw / 255.0, targets=targets / 255.0)


__all__ = ["ColorDataset", "generate_dataset"]
