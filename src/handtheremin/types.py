from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


Point2 = Tuple[float, float]  # normalized (x, y), both in [0, 1]


class ControlPoint(str, Enum):
    """Which point of the hand skeleton stands in for the whole hand."""

    INDEX_TIP = "index_tip"
    CENTROID = "centroid"


class MatchKind(int, Enum):
    """Strength of a handedness label match, comparable with `<`."""

    NONE = 0
    PARTIAL = 1
    EXACT = 2


class AssignmentSource(str, Enum):
    """How a role ended up with its hand."""

    LABEL_EXACT = "label_exact"
    LABEL_PARTIAL = "label_partial"
    NEAREST = "nearest"
    SINGLE_HAND = "single_hand"
    JOINT_COST = "joint_cost"
    COLLISION = "collision"


@dataclass(frozen=True)
class PitchAntenna:
    """Vertical segment at `x` from `y1` to `y2`."""

    x: float
    y1: float
    y2: float


@dataclass(frozen=True)
class VolumeAntenna:
    """Horizontal segment (or loop bar) at `y` from `x1` to `x2`."""

    x1: float
    x2: float
    y: float


@dataclass(frozen=True)
class TrackedHand:
    """One hand as delivered by the tracker, before any measuring."""

    landmarks: Tuple[Point2, ...]  # length 21 for a well-formed hand
    label: str = ""  # lower-cased "left" / "right", may be empty
    score: Optional[float] = None


@dataclass(frozen=True, eq=False)
class HandDetection:
    """
    A tracked hand measured against the active antennas.

    Compared by identity: two detections at the same spot are still two hands.
    """

    landmarks: Tuple[Point2, ...]
    control_point: Optional[Point2]
    label: str = ""
    pitch_distance: float = math.inf
    volume_distance: float = math.inf
    score: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return self.control_point is not None


@dataclass(frozen=True)
class RoleAssignment:
    pitch_hand: Optional[HandDetection] = None
    volume_hand: Optional[HandDetection] = None
    pitch_source: Optional[AssignmentSource] = None
    volume_source: Optional[AssignmentSource] = None

    @property
    def has_pitch_hand(self) -> bool:
        return self.pitch_hand is not None

    @property
    def has_volume_hand(self) -> bool:
        return self.volume_hand is not None


@dataclass(frozen=True)
class FrameControls:
    """Raw (unsmoothed) control values for one frame; None where the role hand is absent."""

    pitch_control: Optional[float]
    volume_proximity: Optional[float]
    assignment: RoleAssignment = field(default_factory=RoleAssignment)

    @property
    def has_pitch_hand(self) -> bool:
        return self.pitch_control is not None

    @property
    def has_volume_hand(self) -> bool:
        return self.volume_proximity is not None


@dataclass(frozen=True)
class SynthTargets:
    """Per-frame targets for the audio sink plus what observers should display."""

    frequency: float  # oscillator target in Hz (held value when the pitch hand is gone)
    gain: float  # audible gain in [0, max_gain]; 0 unless both hands are present
    retarget_frequency: bool
    frequency_time_constant: float
    gain_time_constant: float
    frequency_display: Optional[float] = None  # None -> "-- Hz"
    volume_display: Optional[float] = None  # None -> "-- %"
