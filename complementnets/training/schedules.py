"""Learning-rate schedules."""

from __future__ import annotations

from ..core.errors import InvalidArgument


def learning_rate(
    base_rate: float,
    step: int,
    *,
    decay: float = 0.85,
    every: int = 42,
) -> float:
    """Return ``base_rate * decay ** (step // every)``.

    With the defaults the rate drops by 15% every 42 steps.
    """

    if every <= 0:
        raise InvalidArgument("every must be positive")
    if step < 0:
        raise InvalidArgument("step must be non-negative")
    return float(base_rate) * float(decay) ** (int(step) // int(every))


__all__ = ["learning_rate"]
