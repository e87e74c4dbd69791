"""
Two-stage smoothing.

`SmoothingState` is the frame-rate EMA over control values. `ParameterRamp`
is the audio-rate exponential approach the sound card thread applies on top,
so a new target never lands as a click.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .geometry import clamp


def ema_step(current: float, raw: float, alpha: float) -> float:
    return current + (raw - current) * alpha


def frames_to_converge(alpha: float, eps: float) -> int:
    """Frames of constant input until an EMA is within `eps` of it (starting a full unit away)."""
    return int(math.ceil(math.log(eps) / math.log(1.0 - alpha)))


@dataclass
class SmoothingState:
    smoothed_pitch_control: float = 0.5
    smoothed_volume_proximity: float = 0.5

    def update_pitch(self, raw: float, alpha: float) -> float:
        self.smoothed_pitch_control = ema_step(self.smoothed_pitch_control, clamp(raw, 0.0, 1.0), alpha)
        return self.smoothed_pitch_control

    def update_volume(self, raw: float, alpha: float) -> float:
        self.smoothed_volume_proximity = ema_step(self.smoothed_volume_proximity, clamp(raw, 0.0, 1.0), alpha)
        return self.smoothed_volume_proximity


class ParameterRamp:
    """
    A value that exponentially approaches its target.

    Same shape as an audio parameter's set-target-at-time: after a target is
    set at `start_time`, the value follows
    ``target + (v0 - target) * exp(-(t - start_time) / time_constant)``.
    Not thread safe by itself; the owner holds the lock.
    """

    def __init__(self, value: float) -> None:
        self.value = float(value)
        self.target = float(value)
        self.time_constant = 0.05
        self.start_time = 0.0

    def set_target(self, target: float, start_time: float, time_constant: float) -> None:
        self.target = float(target)
        self.start_time = float(start_time)
        self.time_constant = max(float(time_constant), 1e-6)

    def render(self, t0: float, frames: int, sample_rate: int) -> np.ndarray:
        """Values for the `frames` samples following time `t0`, advancing the ramp."""
        if frames <= 0:
            return np.zeros(0, dtype=np.float64)
        times = t0 + np.arange(1, frames + 1, dtype=np.float64) / sample_rate
        elapsed = np.maximum(times - max(self.start_time, t0), 0.0)
        out = self.target + (self.value - self.target) * np.exp(-elapsed / self.time_constant)
        self.value = float(out[-1])
        return out
