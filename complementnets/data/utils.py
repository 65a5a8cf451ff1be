"""Utility helpers for dataset generation and batching."""

from __future__ import annotations

import random
from typing import Iterator

import numpy as np

from ..core.errors import InvalidArgument, ShapeMismatch
from ..core.types import Batch


def seed_everything(seed: int) -> np.random.Generator:
    """Seed Python and NumPy RNGs and return a generator."""

    random.seed(seed)
    np.random.seed(seed % (2**32 - 1))
    return np.random.default_rng(seed)


def require_positive(name: str, value: int) -> int:
    if isinstance(value, bool) or int(value) != value or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def contiguous_batches(
    features: np.ndarray, targets: np.ndarray, batch_size: int
) -> Iterator[Batch]:
    """Yield non-overlapping ``[i, i + batch_size)`` slices in order.

    A trailing partial batch is dropped.
    """

    batch_size = require_positive("batch_size", batch_size)
    if features.shape[0] != targets.shape[0]:
        raise ShapeMismatch(
            f"features have {features.shape[0]} rows but targets have {targets.shape[0]}"
        )
    last_start = features.shape[0] - batch_size
    for start in range(0, last_start + 1, batch_size):
        end = start + batch_size
        yield Batch(inputs=features[start:end], targets=targets[start:end])


def count_batches(n_samples: int, batch_size: int) -> int:
    return n_samples // require_positive("batch_size", batch_size)
