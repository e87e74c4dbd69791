from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .engine import FrameResult
from .geometry import anchor_for_pitch, anchor_for_volume
from .modes import ModeConfig
from .types import HandDetection, Point2

# BGR
PITCH_COLOR = (243, 213, 61)
VOLUME_COLOR = (138, 224, 255)
PITCH_HAND_COLOR = (176, 220, 68)
VOLUME_HAND_COLOR = (90, 143, 255)
IDLE_HAND_COLOR = (150, 150, 150)

HAND_CONNECTIONS: List[Tuple[int, int]] = [
    # thumb
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 4),
    # index
    (0, 5),
    (5, 6),
    (6, 7),
    (7, 8),
    # middle
    (5, 9),
    (9, 10),
    (10, 11),
    (11, 12),
    # ring
    (9, 13),
    (13, 14),
    (14, 15),
    (15, 16),
    # pinky
    (13, 17),
    (17, 18),
    (18, 19),
    (19, 20),
    # palm base
    (0, 17),
]


def to_px(point: Point2, w: int, h: int) -> Tuple[int, int]:
    return (int(round(point[0] * w)), int(round(point[1] * h)))


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_dashed_line(frame, p0: Tuple[int, int], p1: Tuple[int, int], color, thickness=2, dash=10, gap=8):
    length = float(np.hypot(p1[0] - p0[0], p1[1] - p0[1]))
    if length < 1:
        return frame
    step = dash + gap
    for start in np.arange(0.0, length, step):
        end = min(start + dash, length)
        a = (int(p0[0] + (p1[0] - p0[0]) * start / length), int(p0[1] + (p1[1] - p0[1]) * start / length))
        b = (int(p0[0] + (p1[0] - p0[0]) * end / length), int(p0[1] + (p1[1] - p0[1]) * end / length))
        cv2.line(frame, a, b, color, thickness, cv2.LINE_AA)
    return frame


def draw_antennas(frame, mode_config: ModeConfig):
    h, w = frame.shape[:2]
    p = mode_config.pitch_antenna
    v = mode_config.volume_antenna
    draw_dashed_line(frame, to_px((p.x, p.y1), w, h), to_px((p.x, p.y2), w, h), PITCH_COLOR, 4)
    draw_dashed_line(frame, to_px((v.x1, v.y), w, h), to_px((v.x2, v.y), w, h), VOLUME_COLOR, 4)
    return frame


def draw_hand(frame, landmarks: Sequence[Point2], color):
    h, w = frame.shape[:2]
    pts = [to_px(lm, w, h) for lm in landmarks]
    for a, b in HAND_CONNECTIONS:
        if a < len(pts) and b < len(pts):
            cv2.line(frame, pts[a], pts[b], color, 2, cv2.LINE_AA)
    for pt in pts:
        cv2.circle(frame, pt, 3, color, -1, lineType=cv2.LINE_AA)
    return frame


def draw_guide(frame, point: Point2, anchor: Point2, color):
    h, w = frame.shape[:2]
    return draw_dashed_line(frame, to_px(point, w, h), to_px(anchor, w, h), color, 2, dash=5, gap=6)


def _format_hz(value: Optional[float]) -> str:
    return "-- Hz" if value is None else f"{int(round(value))} Hz"


def _format_pct(value: Optional[float]) -> str:
    return "-- %" if value is None else f"{int(round(value * 100))}%"


def draw_frame_result(frame, result: FrameResult, mode_config: ModeConfig, status: Optional[str] = None):
    """Antennas, every tracked hand (coloured by role), guides to the anchors and a HUD."""
    draw_antennas(frame, mode_config)

    assignment = result.controls.assignment
    for det in result.detections:
        if det is assignment.pitch_hand:
            color = PITCH_HAND_COLOR
        elif det is assignment.volume_hand:
            color = VOLUME_HAND_COLOR
        else:
            color = IDLE_HAND_COLOR
        draw_hand(frame, det.landmarks, color)

    hand: Optional[HandDetection] = assignment.pitch_hand
    if hand is not None and hand.control_point is not None:
        draw_guide(frame, hand.control_point, anchor_for_pitch(hand.control_point, mode_config.pitch_antenna), PITCH_COLOR)
    hand = assignment.volume_hand
    if hand is not None and hand.control_point is not None:
        draw_guide(
            frame, hand.control_point, anchor_for_volume(hand.control_point, mode_config.volume_antenna), VOLUME_COLOR
        )

    targets = result.targets
    pitch_state = "Tracking" if assignment.has_pitch_hand else "Missing"
    volume_state = "Tracking" if assignment.has_volume_hand else "Missing"
    lines: Iterable[Tuple[str, Tuple[int, int, int]]] = (
        (f"pitch: {_format_hz(targets.frequency_display)} ({mode_config.pitch_label} hand {pitch_state})", PITCH_COLOR),
        (f"volume: {_format_pct(targets.volume_display)} ({mode_config.volume_label} hand {volume_state})", VOLUME_COLOR),
    )
    y = 28
    for text, color in lines:
        draw_text(frame, text, (12, y), color)
        y += 28
    if status:
        draw_text(frame, status, (12, y), (255, 255, 255), scale=0.55)
    return frame
