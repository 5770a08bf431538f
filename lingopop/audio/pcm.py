"""
PCM16 decoding for synthesized speech.

Speech arrives base64-encoded as signed 16-bit little-endian mono PCM at
24 kHz. Every 2 bytes become one sample normalized by 32768, so the output
lies in [-1.0, 1.0).
"""

from __future__ import annotations

import base64
import binascii

import numpy as np

from lingopop.core.errors import AudioFailure

SAMPLE_RATE = 24_000
_PCM16_SCALE = 32768.0


def decode_pcm16(payload: str | bytes) -> np.ndarray:
    """
    Decode base64 PCM16LE into float32 samples.

    Raises:
        AudioFailure: invalid base64, or an odd number of bytes
    """
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AudioFailure("Speech payload is not valid base64") from exc

    if len(raw) % 2:
        raise AudioFailure(f"PCM16 payload has odd length ({len(raw)} bytes)")

    samples = np.frombuffer(raw, dtype="<i2").astype(np.float32)
    samples /= _PCM16_SCALE
    return samples


def duration_seconds(samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> float:
    return samples.shape[0] / float(sample_rate)
