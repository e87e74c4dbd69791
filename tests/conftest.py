from __future__ import annotations

from typing import Optional

import pytest

from handtheremin.types import HandDetection, Point2, TrackedHand


def make_detection(
    label: str = "",
    pitch_distance: float = 0.3,
    volume_distance: float = 0.3,
    point: Optional[Point2] = (0.5, 0.5),
) -> HandDetection:
    return HandDetection(
        landmarks=(point,) * 21 if point is not None else (),
        control_point=point,
        label=label,
        pitch_distance=pitch_distance,
        volume_distance=volume_distance,
    )


def make_hand(x: float, y: float, label: str = "", n: int = 21) -> TrackedHand:
    """A flat skeleton with every landmark on (x, y)."""
    return TrackedHand(landmarks=tuple((x, y) for _ in range(n)), label=label)


@pytest.fixture
def detection():
    return make_detection


@pytest.fixture
def hand():
    return make_hand
