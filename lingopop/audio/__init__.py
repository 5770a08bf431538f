"""Speech playback: PCM16 decoding, output device, and the synthesize-and-play pipeline."""

from .output import AudioOutput
from .pcm import SAMPLE_RATE, decode_pcm16
from .pipeline import AudioPipeline

__all__ = ["AudioOutput", "AudioPipeline", "SAMPLE_RATE", "decode_pcm16"]
