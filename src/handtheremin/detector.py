from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2

from .model_assets import ensure_hand_landmarker_task
from .types import Point2, TrackedHand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _SolutionsBackend:
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _try_create_solutions_backend(
    static_image_mode: bool,
    max_num_hands: int,
    model_complexity: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=static_image_mode,
        max_num_hands=max_num_hands,
        model_complexity=model_complexity,
        min_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _SolutionsBackend(hands=hands)


def _create_tasks_backend(
    model_path: str,
    max_num_hands: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> _TasksBackend:
    """
    MediaPipe Tasks HandLandmarker, for builds that ship without `mp.solutions`.

    Needs a `.task` model asset on disk; it is fetched on first use.
    """
    import mediapipe as mp  # type: ignore
    from mediapipe.tasks.python import BaseOptions  # type: ignore
    from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore

    model_path = ensure_hand_landmarker_task(model_path)
    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        num_hands=max_num_hands,
        min_hand_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _TasksBackend(mp=mp, landmarker=HandLandmarker.create_from_options(options))


def _normalized_points(landmarks) -> Tuple[Point2, ...]:
    return tuple((float(lm.x), float(lm.y)) for lm in landmarks)


class HandTracker:
    """
    MediaPipe hand tracker producing `TrackedHand`s in normalized coordinates.

    Input frames are expected as **BGR** images (OpenCV default). Labels are
    lower-cased ("left" / "right") and left empty when the model gives none.
    """

    def __init__(
        self,
        static_image_mode: bool = False,
        max_num_hands: int = 2,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.6,
        tasks_model_path: str = "models/hand_landmarker.task",
        frame_interval_ms: int = 33,
    ) -> None:
        self._frame_interval_ms = frame_interval_ms
        self._timestamp_ms = 0
        self._tasks: Optional[_TasksBackend] = None

        self._solutions = _try_create_solutions_backend(
            static_image_mode=static_image_mode,
            max_num_hands=max_num_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        if self._solutions is not None:
            logger.info("Hand tracking backend: mediapipe solutions")
            return

        try:
            self._tasks = _create_tasks_backend(
                model_path=tasks_model_path,
                max_num_hands=max_num_hands,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
        except (ImportError, RuntimeError, OSError) as e:
            raise RuntimeError(
                "Could not initialize MediaPipe hand tracking.\n"
                "Your `mediapipe` build has no `mp.solutions` and the Tasks HandLandmarker fallback failed.\n"
                f"Model path: {tasks_model_path}"
            ) from e
        logger.info("Hand tracking backend: mediapipe tasks (%s)", tasks_model_path)

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.hands.close()
        if self._tasks is not None:
            self._tasks.landmarker.close()

    def __enter__(self) -> "HandTracker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def track(self, frame_bgr) -> List[TrackedHand]:
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.hands.process(frame_rgb)
            landmarks_list = results.multi_hand_landmarks or []
            handedness_list = results.multi_handedness or []

            hands: List[TrackedHand] = []
            for i, hand_landmarks in enumerate(landmarks_list):
                label, score = "", None
                if i < len(handedness_list) and handedness_list[i].classification:
                    c = handedness_list[i].classification[0]
                    label = (getattr(c, "label", "") or "").lower()
                    score = float(getattr(c, "score", 0.0))
                hands.append(TrackedHand(_normalized_points(hand_landmarks.landmark), label, score))
            return hands

        if self._tasks is None:
            return []

        mp = self._tasks.mp
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        # VIDEO mode requires monotonically increasing timestamps.
        self._timestamp_ms += self._frame_interval_ms
        result = self._tasks.landmarker.detect_for_video(mp_image, self._timestamp_ms)

        hand_landmarks_list = getattr(result, "hand_landmarks", None) or []
        handedness_list = getattr(result, "handedness", None) or []

        hands = []
        for i, landmarks in enumerate(hand_landmarks_list):
            label, score = "", None
            if i < len(handedness_list) and handedness_list[i]:
                cat0 = handedness_list[i][0]
                label = (getattr(cat0, "category_name", None) or getattr(cat0, "display_name", None) or "").lower()
                score = float(getattr(cat0, "score", 0.0))
            hands.append(TrackedHand(_normalized_points(landmarks), label, score))
        return hands
