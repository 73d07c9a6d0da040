"""Stub TTS provider for offline use and testing."""

import struct

from devvoice.tts.provider import TTSProvider

SAMPLE_RATE = 16000
# Roughly 150 words per minute at ~5 characters per word
CHARS_PER_SECOND = 13


class StubTTSProvider(TTSProvider):
    """Returns a silent mono 16-bit WAV whose length scales with the text.

    Every requested format is answered with WAV, since no encoder is available.
    """

    def synthesize(
        self,
        text: str,
        voice: str | None = None,
        format: str = "mp3",
    ) -> tuple[bytes, str]:
        return silent_wav(max(1, len(text) // CHARS_PER_SECOND)), "audio/wav"


def silent_wav(duration_seconds: int, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Build a valid PCM WAV file containing silence."""
    bytes_per_sample = 2
    data = bytes(duration_seconds * sample_rate * bytes_per_sample)

    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + len(data),
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size
        1,  # PCM
        1,  # mono
        sample_rate,
        sample_rate * bytes_per_sample,  # byte rate
        bytes_per_sample,  # block align
        8 * bytes_per_sample,
        b"data",
        len(data),
    )
    return header + data
