#!/usr/bin/env python3
"""
Webcam theremin.

One hand's distance from the vertical pitch antenna sets the pitch, the other
hand's distance from the horizontal volume antenna sets the loudness (closer
is quieter). Both hands must be in frame for sound.

Keys: m = switch pitch hand, [ / ] = shrink / grow the pitch range,
c = toggle the pitch curve, q or ESC = quit.
"""

from __future__ import annotations

import argparse
import logging
import os
import platform
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from handtheremin.audio import ThereminVoice  # noqa: E402
from handtheremin.config import ThereminConfig  # noqa: E402
from handtheremin.curves import ResponseCurve  # noqa: E402
from handtheremin.detector import HandTracker  # noqa: E402
from handtheremin.drawing import draw_frame_result  # noqa: E402
from handtheremin.engine import ThereminEngine  # noqa: E402
from handtheremin.modes import mode_names, next_mode  # noqa: E402
from handtheremin.types import ControlPoint  # noqa: E402

logger = logging.getLogger("theremin_demo")

PITCH_FAR_STEP = 0.05


def main() -> int:
    ap = argparse.ArgumentParser(description="Hand-tracked theremin.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=960, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument("--mode", default="right", choices=mode_names(), help="Hand that plays pitch (default: right)")
    ap.add_argument(
        "--pitch-curve",
        default=ResponseCurve.LOG_COMPRESSED.value,
        choices=[c.value for c in ResponseCurve],
        help="Distance-to-pitch response curve",
    )
    ap.add_argument(
        "--control-point",
        default=ControlPoint.INDEX_TIP.value,
        choices=[c.value for c in ControlPoint],
        help="Point of the hand measured against the antennas",
    )
    ap.add_argument("--pitch-far", type=float, default=None, help="Override the pitch far distance (0..1)")
    ap.add_argument("--max-gain", type=float, default=0.38, help="Output gain with the volume hand fully away")
    ap.add_argument(
        "--tasks-model",
        default="models/hand_landmarker.task",
        help="Path to MediaPipe Tasks model (auto-downloaded if missing)",
    )
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ThereminConfig(
        pitch_curve=ResponseCurve(args.pitch_curve),
        control_point=ControlPoint(args.control_point),
        max_gain=args.max_gain,
    )
    try:
        engine = ThereminEngine(config, mode=args.mode)
    except ValueError as e:
        ap.error(str(e))
    if args.pitch_far is not None:
        engine.set_pitch_far(args.pitch_far)

    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(args.camera, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(args.camera)

    if not cap.isOpened():
        raise RuntimeError(
            f"Could not open camera index {args.camera}. "
            "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal."
        )

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, args.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, args.height)

    status = engine.tracking_status(False, False)
    try:
        with HandTracker(max_num_hands=2, tasks_model_path=args.tasks_model) as tracker, ThereminVoice() as voice:
            while True:
                ok, frame = cap.read()
                if not ok:
                    logger.warning("Camera returned no frame, stopping")
                    break

                if not args.no_mirror:
                    frame = cv2.flip(frame, 1)

                result = engine.step(tracker.track(frame))
                voice.apply(result.targets)
                if result.status is not None:
                    status = result.status

                frame = draw_frame_result(frame, result, engine.mode_config, status)
                cv2.imshow("handtheremin", frame)

                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), 27):
                    break
                if key == ord("m"):
                    engine.set_mode(next_mode(engine.mode))
                elif key == ord("["):
                    engine.set_pitch_far(engine.pitch_far - PITCH_FAR_STEP)
                elif key == ord("]"):
                    engine.set_pitch_far(engine.pitch_far + PITCH_FAR_STEP)
                elif key == ord("c"):
                    curves = list(ResponseCurve)
                    config.pitch_curve = curves[(curves.index(config.pitch_curve) + 1) % len(curves)]
                    logger.info("Pitch curve: %s", config.pitch_curve.value)
    finally:
        cap.release()
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
