"""PCM → WAV container conversion for text-to-speech playback.

TTS endpoints return bare PCM (24 kHz, mono, 16-bit signed by default);
players need a RIFF/WAV header in front of it.
"""

from __future__ import annotations
import io
import wave

DEFAULT_SAMPLE_RATE = 24_000


def pcm_to_wav(
    pcm: bytes,
    *,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    """Wrap raw little-endian PCM frames in a 44-byte WAV header."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()
