"""Loss functions returning both the scalar loss and dL/dy."""

from __future__ import annotations

import numpy as np

from ..core.errors import ShapeMismatch
from ..core.types import Array


def mean_squared_error(pred: Array, target: Array) -> tuple[float, Array]:
    """Mean of squared differences over every element, with its gradient."""

    if pred.shape != target.shape:
        raise ShapeMismatch(
            f"prediction shape {pred.shape} does not match target shape {target.shape}"
        )
    diff = pred - target
    loss = float(np.mean(np.square(diff)))
    grad = 2.0 * diff / diff.size
    return loss, grad


__all__ = ["mean_squared_error"]
