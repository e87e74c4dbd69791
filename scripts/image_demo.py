from __future__ import annotations

import argparse
import logging
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from handtheremin.detector import HandTracker  # noqa: E402
from handtheremin.drawing import draw_frame_result  # noqa: E402
from handtheremin.engine import ThereminEngine  # noqa: E402
from handtheremin.modes import mode_names  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Theremin role assignment on a still image.")
    ap.add_argument("--image", required=True, help="Path to input image")
    ap.add_argument("--out", required=True, help="Path to output image (annotated)")
    ap.add_argument("--mode", default="right", choices=mode_names(), help="Hand that plays pitch (default: right)")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    frame = cv2.imread(args.image)
    if frame is None:
        raise RuntimeError(f"Could not read image: {args.image}")

    engine = ThereminEngine(mode=args.mode)
    with HandTracker(static_image_mode=True) as tracker:
        result = engine.step(tracker.track(frame))
    out = draw_frame_result(frame, result, engine.mode_config, result.status)

    ok = cv2.imwrite(args.out, out)
    if not ok:
        raise RuntimeError(f"Could not write output image: {args.out}")

    assignment = result.controls.assignment
    print(f"hands: {len(result.detections)}")
    for i, d in enumerate(result.detections):
        role = "pitch" if d is assignment.pitch_hand else "volume" if d is assignment.volume_hand else "-"
        print(
            f"[{i}] label={d.label or '?'} score={d.score} role={role} "
            f"point={d.control_point} pitch_d={d.pitch_distance:.3f} volume_d={d.volume_distance:.3f}"
        )
    print(f"pitch: {assignment.pitch_source} volume: {assignment.volume_source}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
