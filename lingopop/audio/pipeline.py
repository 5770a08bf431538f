"""
Audio Pipeline: synthesize speech, decode it, play it.

Every failure along the way (request, decode, device) is reported as
``AudioFailure``. Audio is an enhancement: callers that cannot afford an
interruption use ``try_play``, which logs and returns False instead.

There is no queue. A second request while one is playing starts a second
stream; one-at-a-time gating belongs to the caller.
"""

from __future__ import annotations

from loguru import logger

from lingopop.core.errors import AudioFailure, LingoPopError
from lingopop.core.harness import bounded
from lingopop.core.languages import DEFAULT_VOICE, Voice
from lingopop.integrations.oracle import Oracle

from .output import AudioOutput
from .pcm import decode_pcm16, duration_seconds


class AudioPipeline:
    """Text in, sound out."""

    def __init__(
        self,
        oracle: Oracle,
        output: AudioOutput,
        timeout: float = 20.0,
        default_voice: Voice = DEFAULT_VOICE,
    ):
        self.oracle = oracle
        self.output = output
        self.timeout = timeout
        self.default_voice = default_voice

    async def synthesize_and_play(self, text: str, voice: Voice | None = None) -> float:
        """
        Speak ``text`` and return the scheduled duration in seconds.

        Raises:
            AudioFailure: on any request, decode or device failure
        """
        text = text.strip()
        if not text:
            raise AudioFailure("Nothing to say")
        voice = voice or self.default_voice

        try:
            payload = await bounded(
                self.oracle.synthesize(text, voice),
                operation="synthesize",
                timeout=self.timeout,
            )
        except LingoPopError as exc:
            raise AudioFailure(f"Speech synthesis failed: {exc}") from exc
        except Exception as exc:
            logger.opt(exception=exc).warning("Unexpected error during speech synthesis")
            raise AudioFailure(f"Speech synthesis failed: {type(exc).__name__}: {exc}") from exc

        samples = decode_pcm16(payload)
        if samples.size == 0:
            raise AudioFailure("Speech payload contained no samples")

        try:
            self.output.play(samples)
        except AudioFailure:
            raise
        except Exception as exc:
            raise AudioFailure(f"Playback failed: {type(exc).__name__}: {exc}") from exc
        return duration_seconds(samples, self.output.sample_rate)

    async def try_play(self, text: str, voice: Voice | None = None) -> bool:
        """Like ``synthesize_and_play`` but never raises. Returns whether audio started."""
        try:
            await self.synthesize_and_play(text, voice)
        except AudioFailure as exc:
            logger.warning(f"Audio skipped: {exc}")
            return False
        return True
