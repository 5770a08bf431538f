"""
Audio output device.

One ``AudioOutput`` lives for the whole process (owned by the app context).
The device is acquired on first use and reused afterwards. Each playback
opens its own stream, so overlapping requests play concurrently.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from loguru import logger

from lingopop.core.errors import AudioFailure

from .pcm import SAMPLE_RATE


class AudioOutput:
    """Lazily acquired handle on the default output device."""

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate
        self._backend: Any = None
        self._streams: set[Any] = set()

    @property
    def acquired(self) -> bool:
        return self._backend is not None

    @property
    def active_streams(self) -> int:
        return len(self._streams)

    def acquire(self):
        """
        Return the audio backend, acquiring it on first call.

        Raises:
            AudioFailure: no audio library or no output device on this platform
        """
        if self._backend is not None:
            return self._backend

        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:
            # OSError: PortAudio shared library missing
            raise AudioFailure("Audio playback is not available on this platform") from exc

        try:
            device = sd.query_devices(kind="output")
        except (sd.PortAudioError, ValueError) as exc:
            raise AudioFailure("No audio output device found") from exc

        logger.debug(f"Audio output: {device['name']} @ {self.sample_rate} Hz")
        self._backend = sd
        return sd

    def play(self, samples: np.ndarray) -> None:
        """Start playing mono float32 ``samples`` immediately. Does not block."""
        sd = self.acquire()
        position = 0

        def callback(outdata, frames, time_info, status):
            nonlocal position
            chunk = samples[position:position + frames]
            outdata[: len(chunk), 0] = chunk
            position += len(chunk)
            if len(chunk) < frames:
                outdata[len(chunk):] = 0
                raise sd.CallbackStop()

        stream = None
        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                callback=callback,
                finished_callback=lambda: self._streams.discard(stream),
            )
            self._streams.add(stream)
            stream.start()
        except Exception as exc:
            # PortAudioError, or anything else the backend raises while opening
            self._streams.discard(stream)
            raise AudioFailure(f"Could not open audio stream: {exc}") from exc
