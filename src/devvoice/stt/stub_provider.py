"""Stub STT provider that returns deterministic transcripts for testing.

It doesn't require any external dependencies or API keys.
"""

import logging

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ["wav", "mp3", "m4a", "opus"]


class StubSTTProvider:
    """Returns queued transcripts in order, then a fixed default transcript."""

    def __init__(self, transcripts: list[str] | None = None, default: str = "git status"):
        """Initialize stub STT provider.

        Args:
            transcripts: Transcripts to return, one per call
            default: Transcript returned once the queue is empty
        """
        self.transcripts = list(transcripts or [])
        self.default = default
        self.calls = 0

    def transcribe(self, audio_data: bytes, format: str) -> str:
        if format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported audio format: {format}. "
                f"Supported formats: {', '.join(SUPPORTED_FORMATS)}"
            )

        self.calls += 1
        if self.transcripts:
            return self.transcripts.pop(0)
        return self.default
