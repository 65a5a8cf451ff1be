"""HSL based complementary color math.

The conversion keeps the fixed-precision constants of the reference demo
(``1.0472`` for pi/3 and ``6.2832`` for 2*pi) so that integer outputs match
it exactly for every input in ``[0, 255]^3``.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import InvalidArgument
from .types import RGB, Array

_SIXTH_TURN = 1.0472
_THIRD_TURN = 2.0944
_TWO_THIRDS_TURN = 4.1888
_FULL_TURN = 6.2832


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_channel(value: int) -> int:
    return min(255, max(0, value))


def _validate_rgb(rgb: Sequence[int]) -> RGB:
    try:
        rgb = tuple(rgb)
    except TypeError as exc:
        raise InvalidArgument(f"Expected 3 color channels, got {rgb!r}") from exc
    if len(rgb) != 3:
        raise InvalidArgument(f"Expected 3 color channels, got {len(rgb)}")
    channels = []
    for value in rgb:
        try:
            integral = not isinstance(value, bool) and int(value) == value
        except (TypeError, ValueError, OverflowError):
            integral = False
        if not integral:
            raise InvalidArgument(f"Color channels must be integers, got {value!r}")
        value = int(value)
        if not 0 <= value <= 255:
            raise InvalidArgument(f"Color channel {value} outside [0, 255]")
        channels.append(value)
    return channels[0], channels[1], channels[2]


def rgb_to_hsl(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """Return ``(hue_degrees, saturation, lightness)`` for an integer RGB triple."""

    r, g, b = (c / 255.0 for c in _validate_rgb(rgb))
    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2.0

    if high == low:
        return 0.0, 0.0, lightness

    d = high - low
    if lightness > 0.5:
        saturation = d / (2.0 - high - low)
    else:
        saturation = d / (high + low)

    if high == r and g >= b:
        hue = _SIXTH_TURN * (g - b) / d
    elif high == r:
        hue = _SIXTH_TURN * (g - b) / d + _FULL_TURN
    elif high == g:
        hue = _SIXTH_TURN * (b - r) / d + _THIRD_TURN
    else:
        hue = _SIXTH_TURN * (r - g) / d + _TWO_THIRDS_TURN

    return hue / _FULL_TURN * 360.0, saturation, lightness


def hue_to_rgb(p: float, q: float, t: float) -> float:
    """Piecewise interpolation of one channel from the hue offset ``t``."""

    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    """Convert ``hue`` in ``[0, 1)`` plus saturation and lightness to integer RGB."""

    if saturation == 0:
        channels = (lightness, lightness, lightness)
    else:
        if lightness < 0.5:
            q = lightness * (1 + saturation)
        else:
            q = lightness + saturation - lightness * saturation
        p = 2 * lightness - q
        channels = (
            hue_to_rgb(p, q, hue + 1 / 3),
            hue_to_rgb(p, q, hue),
            hue_to_rgb(p, q, hue - 1 / 3),
        )
    r, g, b = (_clamp_channel(_round_half_up(c * 255)) for c in channels)
    return r, g, b


def complement(rgb: Sequence[int]) -> RGB:
    """Return the complementary color of ``rgb`` (hue rotated by 180 degrees)."""

    hue, saturation, lightness = rgb_to_hsl(rgb)
    hue += 180
    if hue > 360:
        hue -= 360
    return hsl_to_rgb(hue / 360, saturation, lightness)


def normalize_color(rgb: Sequence[int]) -> Tuple[float, float, float]:
    r, g, b = _validate_rgb(rgb)
    return r / 255, g / 255, b / 255


def denormalize_color(values: Iterable[float]) -> RGB:
    """Map normalised channels back to integers, rounding half-up then clamping."""

    channels = denormalize_array(np.asarray(list(values), dtype=np.float64)).tolist()
    if len(channels) != 3:
        raise InvalidArgument(f"Expected 3 color channels, got {len(channels)}")
    return int(channels[0]), int(channels[1]), int(channels[2])


def denormalize_array(values: Array) -> Array:
    """Vectorised :func:`denormalize_color` for ``[N, 3]`` arrays."""

    # NaN maps to 0 and infinities to the nearest bound.
    values = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    scaled = np.floor(values * 255 + 0.5)
    return np.clip(scaled, 0, 255).astype(np.int64)


def parse_color(text: str) -> RGB:
    """Parse a literal ``"r,g,b"`` triple such as ``"10,200,30"``."""

    parts = [part.strip() for part in str(text).split(",")]
    if len(parts) != 3:
        raise InvalidArgument(f"Malformed color {text!r}: expected 'r,g,b'")
    try:
        values = [int(part, 10) for part in parts]
    except ValueError as exc:
        raise InvalidArgument(f"Malformed color {text!r}: {exc}") from exc
    return _validate_rgb(values)


def format_color(rgb: Sequence[int]) -> str:
    """Return the CSS-style ``rgb(r,g,b)`` label for a swatch."""

    return "rgb(" + ",".join(str(int(c)) for c in rgb) + ")"


__all__ = [
    "complement",
    "denormalize_array",
    "denormalize_color",
    "format_color",
    "hsl_to_rgb",
    "hue_to_rgb",
    "normalize_color",
    "parse_color",
    "rgb_to_hsl",
]
