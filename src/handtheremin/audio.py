from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np
import sounddevice as sd

from .smoothing import ParameterRamp
from .types import SynthTargets

logger = logging.getLogger(__name__)


class ThereminVoice:
    """
    Real-time sine voice driven by `SynthTargets`.

    Frequency and gain glide towards their targets sample by sample, so the
    frame-rate control values never step audibly.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        blocksize: int = 512,
        frequency: float = 440.0,
    ) -> None:
        """
        Args:
            sample_rate: Audio sample rate in Hz
            blocksize: Frames per audio callback
            frequency: Starting oscillator frequency in Hz (starts silent)
        """
        self.sample_rate = sample_rate
        self.blocksize = blocksize

        self._stream: Optional[sd.OutputStream] = None
        self._lock = threading.Lock()
        self._frequency = ParameterRamp(frequency)
        self._gain = ParameterRamp(0.0)
        self._phase = 0.0  # radians
        self._frames_rendered = 0

    @property
    def current_time(self) -> float:
        """Seconds of audio rendered so far; the clock ramps are scheduled against."""
        with self._lock:
            return self._frames_rendered / self.sample_rate

    def start(self) -> None:
        if self._stream is not None:
            return
        try:
            self._stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                callback=self._audio_callback,
                blocksize=self.blocksize,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            raise RuntimeError(f"Could not open an audio output stream: {e}") from e
        logger.info("Audio stream started (%d Hz, block %d)", self.sample_rate, self.blocksize)

    def stop(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
            logger.info("Audio stream stopped")

    def set_frequency(self, value: float, time_constant: float, start_time: Optional[float] = None) -> None:
        with self._lock:
            now = self._frames_rendered / self.sample_rate
            self._frequency.set_target(value, now if start_time is None else start_time, time_constant)

    def set_gain(self, value: float, time_constant: float, start_time: Optional[float] = None) -> None:
        with self._lock:
            now = self._frames_rendered / self.sample_rate
            self._gain.set_target(value, now if start_time is None else start_time, time_constant)

    def apply(self, targets: SynthTargets) -> None:
        now = self.current_time
        if targets.retarget_frequency:
            self.set_frequency(targets.frequency, targets.frequency_time_constant, now)
        self.set_gain(targets.gain, targets.gain_time_constant, now)

    def _audio_callback(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug("Audio callback status: %s", status)
        with self._lock:
            t0 = self._frames_rendered / self.sample_rate
            freq = self._frequency.render(t0, frames, self.sample_rate)
            gain = self._gain.render(t0, frames, self.sample_rate)

            # Integrate frequency so glides stay phase-continuous.
            phase = self._phase + np.cumsum(2.0 * np.pi * freq / self.sample_rate)
            outdata[:, 0] = (gain * np.sin(phase)).astype(np.float32)

            self._phase = float(phase[-1] % (2.0 * np.pi)) if frames else self._phase
            self._frames_rendered += frames

    def __enter__(self) -> "ThereminVoice":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
