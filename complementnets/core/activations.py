"""Activation utilities for complementnets."""

from __future__ import annotations

import numpy as np

from .types import Array


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_deriv(z: Array) -> Array:
    return (z > 0).astype(z.dtype)


def clamp_unit(x: Array) -> Array:
    """Clamp ``x`` element-wise to ``[0, 1]``."""

    return np.minimum(np.maximum(x, 0.0), 1.0)


def clamped_relu_deriv(z: Array) -> Array:
    """Derivative of ``clamp_unit(relu(z))`` with respect to ``z``.

    The upper edge keeps its gradient (``z == 1`` passes), matching the
    ``minimum`` op which routes gradient to its first operand on ties.
    """

    return ((z > 0) & (z <= 1.0)).astype(z.dtype)
