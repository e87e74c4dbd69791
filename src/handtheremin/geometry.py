"""
Antenna geometry in normalized frame coordinates.

Everything here is a pure function of its arguments.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional, Sequence

from .types import ControlPoint, HandDetection, PitchAntenna, Point2, TrackedHand, VolumeAntenna

if TYPE_CHECKING:
    from .modes import ModeConfig


HAND_LANDMARK_COUNT = 21
INDEX_FINGER_TIP = 8


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def distance(a: Point2, b: Point2) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def anchor_for_pitch(point: Point2, antenna: PitchAntenna) -> Point2:
    """Closest point on the vertical pitch antenna."""
    return (antenna.x, clamp(point[1], antenna.y1, antenna.y2))


def anchor_for_volume(point: Point2, antenna: VolumeAntenna) -> Point2:
    """Closest point on the horizontal volume antenna."""
    return (clamp(point[0], antenna.x1, antenna.x2), antenna.y)


def center_from_points(points: Sequence[Point2]) -> Optional[Point2]:
    if not points:
        return None
    n = len(points)
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def control_point_for(landmarks: Sequence[Point2], mode: ControlPoint = ControlPoint.INDEX_TIP) -> Optional[Point2]:
    """
    The single point that represents a hand, or None for a malformed skeleton.

    A skeleton with fewer than 21 landmarks is treated as malformed whatever
    the chosen control point, so a half-delivered hand never plays.
    """
    if len(landmarks) < HAND_LANDMARK_COUNT:
        return None
    if mode is ControlPoint.CENTROID:
        return center_from_points(landmarks)
    x, y = landmarks[INDEX_FINGER_TIP]
    return (float(x), float(y))


def measure_hand(
    hand: TrackedHand,
    mode_config: "ModeConfig",
    control: ControlPoint = ControlPoint.INDEX_TIP,
) -> HandDetection:
    """Build a `HandDetection` with the distances to both antennas of `mode_config`."""
    point = control_point_for(hand.landmarks, control)
    label = (hand.label or "").strip().lower()
    if point is None:
        return HandDetection(landmarks=tuple(hand.landmarks), control_point=None, label=label, score=hand.score)

    pitch_d = distance(point, anchor_for_pitch(point, mode_config.pitch_antenna))
    volume_d = distance(point, anchor_for_volume(point, mode_config.volume_antenna))
    return HandDetection(
        landmarks=tuple(hand.landmarks),
        control_point=point,
        label=label,
        pitch_distance=pitch_d,
        volume_distance=volume_d,
        score=hand.score,
    )
