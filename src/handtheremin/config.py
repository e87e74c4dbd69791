from __future__ import annotations

from dataclasses import dataclass

from .curves import DEFAULT_LOG_CURVE_K, DEFAULT_VOLUME_EXPONENT, ResponseCurve
from .types import ControlPoint


# --- Sound range ---
MIN_FREQ = 110.0  # A2
MAX_FREQ = 1318.51  # E6
MAX_GAIN = 0.38

# --- Control-level EMA (per frame; 0.2 ~ five frame time constant) ---
SMOOTHING = 0.2

# --- Distance ranges, normalized frame units ---
PITCH_NEAR = 0.02
PITCH_FAR = 0.55
VOLUME_NEAR = 0.02
VOLUME_FAR = 0.62

# Smallest span kept between pitch near and a runtime far override.
MIN_PITCH_SPAN = 0.01

# --- Audio-rate ramps (seconds) ---
FREQUENCY_TIME_CONSTANT = 0.045
GAIN_TIME_CONSTANT = 0.05
SILENCE_TIME_CONSTANT = 0.06


@dataclass
class ThereminConfig:
    """Tunables for the control engine. Pass a modified copy to `ThereminEngine`."""

    min_freq: float = MIN_FREQ
    max_freq: float = MAX_FREQ
    max_gain: float = MAX_GAIN
    smoothing: float = SMOOTHING

    pitch_near: float = PITCH_NEAR
    pitch_far: float = PITCH_FAR
    volume_near: float = VOLUME_NEAR
    volume_far: float = VOLUME_FAR

    pitch_curve: ResponseCurve = ResponseCurve.LOG_COMPRESSED
    volume_curve: ResponseCurve = ResponseCurve.INVERSE_SQUARE
    log_curve_k: float = DEFAULT_LOG_CURVE_K
    volume_exponent: float = DEFAULT_VOLUME_EXPONENT
    control_point: ControlPoint = ControlPoint.INDEX_TIP

    initial_pitch_control: float = 0.5
    initial_volume_proximity: float = 0.5

    frequency_time_constant: float = FREQUENCY_TIME_CONSTANT
    gain_time_constant: float = GAIN_TIME_CONSTANT
    silence_time_constant: float = SILENCE_TIME_CONSTANT

    def validate(self) -> "ThereminConfig":
        if self.min_freq <= 0 or self.max_freq <= self.min_freq:
            raise ValueError(f"Need 0 < min_freq < max_freq, got {self.min_freq} / {self.max_freq}")
        if not (0.0 <= self.max_gain <= 1.0):
            raise ValueError(f"max_gain must be within [0, 1], got {self.max_gain}")
        if not (0.0 < self.smoothing < 1.0):
            raise ValueError(f"smoothing must be within (0, 1), got {self.smoothing}")
        for name, near, far in (
            ("pitch", self.pitch_near, self.pitch_far),
            ("volume", self.volume_near, self.volume_far),
        ):
            if near <= 0 or far <= near:
                raise ValueError(f"Need 0 < {name}_near < {name}_far, got {near} / {far}")
        if self.log_curve_k <= 0:
            raise ValueError(f"log_curve_k must be positive, got {self.log_curve_k}")
        for name in ("frequency_time_constant", "gain_time_constant", "silence_time_constant"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("initial_pitch_control", "initial_volume_proximity"):
            if not (0.0 <= getattr(self, name) <= 1.0):
                raise ValueError(f"{name} must be within [0, 1]")
        return self
