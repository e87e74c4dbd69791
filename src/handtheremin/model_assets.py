from __future__ import annotations

import logging
import os
import ssl
import subprocess
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)


HAND_LANDMARKER_TASK_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task"
)


def _remove_partial(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)


def _download_with_urllib(url: str, path: str, timeout_s: int) -> None:
    # python.org builds on macOS may lack root certificates; certifi fixes that when installed.
    try:
        import certifi  # type: ignore

        ctx = ssl.create_default_context(cafile=certifi.where())
    except ImportError:
        ctx = ssl.create_default_context()

    with urllib.request.urlopen(url, context=ctx, timeout=timeout_s) as r, open(path, "wb") as f:
        f.write(r.read())


def _download_with_curl(url: str, path: str) -> bool:
    try:
        proc = subprocess.run(
            ["curl", "-fL", "-o", path, url],
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError:
        return False
    if proc.returncode != 0:
        logger.warning("curl download failed: %s", proc.stderr.strip())
        return False
    return os.path.exists(path) and os.path.getsize(path) > 0


def ensure_hand_landmarker_task(model_path: str, *, url: str = HAND_LANDMARKER_TASK_URL, timeout_s: int = 30) -> str:
    """
    Make sure the Tasks `hand_landmarker.task` model exists at `model_path`.

    Downloads it from the MediaPipe model bucket when missing (urllib first,
    then curl). Raises RuntimeError with manual instructions if both fail.
    """
    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("Downloading hand landmarker model to %s", model_path)

    try:
        _download_with_urllib(url, model_path, timeout_s)
        return model_path
    except (urllib.error.URLError, OSError) as e:
        logger.warning("Model download via urllib failed: %s", e)
        _remove_partial(model_path)
        cause = e

    if _download_with_curl(url, model_path):
        return model_path
    _remove_partial(model_path)

    raise RuntimeError(
        "Missing MediaPipe Tasks model file and the download failed.\n\n"
        f"Expected model at: {model_path}\n"
        "Download it manually:\n"
        f'  mkdir -p "{os.path.dirname(model_path) or "."}"\n'
        f'  curl -L -o "{model_path}" "{url}"\n'
    ) from cause
