"""Error taxonomy for complementnets."""

from __future__ import annotations


class ComplementNetsError(Exception):
    """Base class for all library errors."""


class InvalidArgument(ComplementNetsError, ValueError):
    """Raised for non-positive sizes, unknown modes or malformed colors."""


class ShapeMismatch(ComplementNetsError, ValueError):
    """Raised when batch or layer dimensions disagree."""


class NumericInstability(ComplementNetsError, FloatingPointError):
    """Raised when NaN or Inf shows up in the cost or the parameters."""


__all__ = [
    "ComplementNetsError",
    "InvalidArgument",
    "NumericInstability",
    "ShapeMismatch",
]
