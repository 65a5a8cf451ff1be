"""Core numerical primitives for complementnets."""

from . import activations, color, errors, types

__all__ = ["activations", "color", "errors", "types"]
