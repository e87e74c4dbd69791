"""Distance -> control value response curves, and control -> sound mappings."""

from __future__ import annotations

import math
from enum import Enum

from .geometry import clamp


DEFAULT_LOG_CURVE_K = 14.0
DEFAULT_VOLUME_EXPONENT = 1.35


def _step(d: float, near: float) -> float:
    # Degenerate range: nothing to interpolate over.
    return 1.0 if d <= near else 0.0


def inverse_square_normalized(d: float, near: float, far: float) -> float:
    """
    Field-like response: 1 at `near`, 0 at `far`, steep close to the antenna.

    >>> inverse_square_normalized(0.02, 0.02, 0.55)
    1.0
    >>> inverse_square_normalized(0.55, 0.02, 0.55)
    0.0
    """
    if not (0.0 < near < far):
        return _step(d, near)
    c = clamp(d, near, far)
    strength = 1.0 / (c * c)
    near_strength = 1.0 / (near * near)
    far_strength = 1.0 / (far * far)
    return clamp((strength - far_strength) / (near_strength - far_strength), 0.0, 1.0)


def log_compressed(d: float, near: float, far: float, k: float = DEFAULT_LOG_CURVE_K) -> float:
    """
    Linear position in [near, far] bent by `1 - log1p(k*x) / log1p(k)`.

    Small moves near the antenna cover a lot of the range, broad moves far
    away cover little.
    """
    if not (0.0 <= near < far) or k <= 0:
        return _step(d, near)
    x = (clamp(d, near, far) - near) / (far - near)
    return clamp(1.0 - math.log1p(k * x) / math.log1p(k), 0.0, 1.0)


class ResponseCurve(str, Enum):
    INVERSE_SQUARE = "inverse_square"
    LOG_COMPRESSED = "log_compressed"

    def apply(self, d: float, near: float, far: float, k: float = DEFAULT_LOG_CURVE_K) -> float:
        if math.isnan(d):
            return 0.0
        if self is ResponseCurve.LOG_COMPRESSED:
            return log_compressed(d, near, far, k)
        return inverse_square_normalized(d, near, far)


def map_control_to_frequency(control: float, min_freq: float, max_freq: float) -> float:
    """Exponential (equal-interval) mapping of [0, 1] onto [min_freq, max_freq]."""
    c = clamp(control, 0.0, 1.0)
    if c == 0.0:
        return min_freq
    if c == 1.0:
        return max_freq
    return min_freq * (max_freq / min_freq) ** c


def map_proximity_to_volume(proximity: float, exponent: float = DEFAULT_VOLUME_EXPONENT) -> float:
    # Closer to the volume antenna means quieter, like the real instrument.
    openness = clamp(1.0 - proximity, 0.0, 1.0)
    return openness ** exponent
