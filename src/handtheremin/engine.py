"""
The theremin control engine.

`ThereminEngine` owns everything that survives between frames: the active
mode, the two EMA accumulators, the optional pitch-far override and the last
announced tracking status. Each frame goes through

    measure -> process (roles + curves) -> advance (EMA + sound targets)

`step` runs all three. Hosts that call in from more than one thread should use
`try_step`, which drops a frame instead of queueing it while another one is
being processed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import MIN_PITCH_SPAN, ThereminConfig
from .curves import map_control_to_frequency, map_proximity_to_volume
from .geometry import clamp, measure_hand
from .modes import DEFAULT_MODE, ModeConfig, ThereminMode, get_mode
from .roles import assign_roles
from .smoothing import SmoothingState
from .types import FrameControls, HandDetection, SynthTargets, TrackedHand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    detections: List[HandDetection]
    controls: FrameControls
    targets: SynthTargets
    status: Optional[str] = None  # set only when the tracking status changed


def status_message(mode_config: ModeConfig, has_pitch: bool, has_volume: bool) -> str:
    pitch_hand = mode_config.pitch_label.capitalize()
    volume_hand = mode_config.volume_label.capitalize()
    if has_pitch and has_volume:
        return f"Both hands tracked. {pitch_hand} hand controls pitch, {mode_config.volume_label} hand controls volume."
    if not has_pitch and not has_volume:
        return "Show both hands in frame to play."
    if not has_pitch:
        return f"{pitch_hand} hand missing. {pitch_hand} hand controls pitch."
    return f"{volume_hand} hand missing. {volume_hand} hand controls volume."


class ThereminEngine:
    def __init__(
        self,
        config: Optional[ThereminConfig] = None,
        mode: Union[str, ThereminMode] = DEFAULT_MODE,
    ) -> None:
        self.config = (config if config is not None else ThereminConfig()).validate()
        self._mode_config = get_mode(mode)
        self.state = SmoothingState(
            smoothed_pitch_control=self.config.initial_pitch_control,
            smoothed_volume_proximity=self.config.initial_volume_proximity,
        )
        self._pitch_far_override: Optional[float] = None
        self._tracking_status: Optional[Tuple[bool, bool]] = None
        self._busy = threading.Lock()

    # ------------------------------------------------------------------
    # Mode and runtime knobs

    @property
    def mode(self) -> ThereminMode:
        return self._mode_config.mode

    @property
    def mode_config(self) -> ModeConfig:
        return self._mode_config

    def set_mode(self, mode: Union[str, ThereminMode]) -> ModeConfig:
        """Switch layouts. Smoothing state is kept; the status is re-announced on the next frame."""
        cfg = get_mode(mode)
        if cfg is not self._mode_config:
            logger.info("Mode %s -> %s", self._mode_config.name, cfg.name)
            self._mode_config = cfg
        self._tracking_status = None
        return cfg

    @property
    def pitch_far(self) -> float:
        if self._pitch_far_override is None:
            return self.config.pitch_far
        return self._pitch_far_override

    def set_pitch_far(self, value: Optional[float]) -> float:
        """Override the pitch "far" distance (normalized units); None restores the configured value."""
        if value is None:
            self._pitch_far_override = None
        else:
            self._pitch_far_override = clamp(float(value), self.config.pitch_near + MIN_PITCH_SPAN, 1.0)
        logger.debug("Pitch far distance: %.3f", self.pitch_far)
        return self.pitch_far

    # ------------------------------------------------------------------
    # Per-frame pipeline

    def measure(self, hands: Iterable[TrackedHand], mode_config: Optional[ModeConfig] = None) -> List[HandDetection]:
        cfg = mode_config or self._mode_config
        return [measure_hand(h, cfg, self.config.control_point) for h in hands]

    def process(self, detections: Sequence[HandDetection], mode_config: Optional[ModeConfig] = None) -> FrameControls:
        """Assign roles and turn each role hand's distance into a raw control value. No state is touched."""
        cfg = self.config
        assignment = assign_roles(detections, mode_config or self._mode_config)

        pitch_control: Optional[float] = None
        if assignment.pitch_hand is not None:
            pitch_control = cfg.pitch_curve.apply(
                assignment.pitch_hand.pitch_distance, cfg.pitch_near, self.pitch_far, cfg.log_curve_k
            )

        volume_proximity: Optional[float] = None
        if assignment.volume_hand is not None:
            volume_proximity = cfg.volume_curve.apply(
                assignment.volume_hand.volume_distance, cfg.volume_near, cfg.volume_far, cfg.log_curve_k
            )

        return FrameControls(pitch_control=pitch_control, volume_proximity=volume_proximity, assignment=assignment)

    def advance(
        self,
        raw_pitch: Optional[float],
        raw_volume: Optional[float],
        has_pitch: bool,
        has_volume: bool,
    ) -> SynthTargets:
        """
        Feed one frame into the EMA accumulators and derive the synth targets.

        An absent role leaves its accumulator untouched. Sound only plays while
        both hands are present: otherwise the gain target is 0, whatever the
        accumulators hold.
        """
        cfg = self.config
        has_pitch = bool(has_pitch) and raw_pitch is not None
        has_volume = bool(has_volume) and raw_volume is not None

        frequency_display: Optional[float] = None
        if has_pitch:
            self.state.update_pitch(raw_pitch, cfg.smoothing)
        frequency = map_control_to_frequency(self.state.smoothed_pitch_control, cfg.min_freq, cfg.max_freq)
        if has_pitch:
            frequency_display = frequency

        volume = 0.0
        volume_display: Optional[float] = None
        if has_volume:
            proximity = self.state.update_volume(raw_volume, cfg.smoothing)
            volume = map_proximity_to_volume(proximity, cfg.volume_exponent)
            volume_display = volume

        if has_pitch and has_volume:
            gain = volume * cfg.max_gain
            gain_tc = cfg.gain_time_constant
        else:
            gain = 0.0
            gain_tc = cfg.silence_time_constant

        return SynthTargets(
            frequency=frequency,
            gain=gain,
            retarget_frequency=has_pitch,
            frequency_time_constant=cfg.frequency_time_constant,
            gain_time_constant=gain_tc,
            frequency_display=frequency_display,
            volume_display=volume_display,
        )

    def tracking_status(self, has_pitch: bool, has_volume: bool) -> Optional[str]:
        """Status line when (has_pitch, has_volume) changed since the last call, else None."""
        key = (bool(has_pitch), bool(has_volume))
        if key == self._tracking_status:
            return None
        self._tracking_status = key
        message = status_message(self._mode_config, *key)
        logger.info(message)
        return message

    def step(self, hands: Iterable[TrackedHand]) -> FrameResult:
        detections = self.measure(hands)
        controls = self.process(detections)
        targets = self.advance(
            controls.pitch_control,
            controls.volume_proximity,
            controls.has_pitch_hand,
            controls.has_volume_hand,
        )
        status = self.tracking_status(controls.has_pitch_hand, controls.has_volume_hand)
        return FrameResult(detections=detections, controls=controls, targets=targets, status=status)

    def try_step(self, hands: Iterable[TrackedHand]) -> Optional[FrameResult]:
        """`step`, or None (frame dropped) when another frame is still being processed."""
        if not self._busy.acquire(blocking=False):
            logger.debug("Dropping frame: previous frame still in flight")
            return None
        try:
            return self.step(hands)
        finally:
            self._busy.release()
