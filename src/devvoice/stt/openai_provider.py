"""Whisper transcription through the OpenAI SDK.

Alternative to the ElevenLabs recognizer, selected with
DEVVOICE_STT_PROVIDER=openai. Needs the ``openai`` extra and OPENAI_API_KEY.
"""

import io
import logging
import os
import time
from typing import Any

from devvoice.errors import MissingCredentialError, TranscriptionError

logger = logging.getLogger(__name__)

try:
    import openai

    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False
    openai = None  # type: ignore


class OpenAISTTProvider:
    """OpenAI Whisper STT provider with timeouts and retries."""

    SUPPORTED_FORMATS = ("wav", "m4a", "mp3", "opus", "flac", "webm")
    MAX_FILE_SIZE = 25 * 1024 * 1024  # Whisper upload limit

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        client: Any = None,
    ):
        """Initialize OpenAI STT provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            timeout: Request timeout in seconds (default: 30)
            max_retries: Maximum number of attempts (default: 3)
            client: Pre-built client, used instead of constructing one
        """
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = os.environ.get("OPENAI_STT_MODEL", "whisper-1")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = 2.0
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not OPENAI_AVAILABLE or openai is None:
                raise MissingCredentialError(
                    "OpenAI package not installed. Install with: pip install 'devvoice[openai]'"
                )
            if not self.api_key:
                raise MissingCredentialError(
                    "OPENAI_API_KEY environment variable is required for OpenAI STT provider"
                )
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def transcribe(self, audio_data: bytes, format: str) -> str:
        """Transcribe audio data to text using OpenAI Whisper API.

        Raises:
            MissingCredentialError: If the openai package or API key is missing
            ValueError: If audio format is unsupported or audio data is invalid
            TranscriptionError: If transcription fails after retries
        """
        client = self.client

        self._validate(audio_data, format)

        logger.info("Transcribing audio: format=%s, size=%d bytes", format, len(audio_data))

        last_error: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                response = client.audio.transcriptions.create(
                    model=self.model,
                    file=(f"audio.{format}", io.BytesIO(audio_data)),
                    response_format="text",
                    timeout=self.timeout,
                )
                transcript = response if isinstance(response, str) else str(response)
                logger.info(
                    "Transcribed audio (attempt %d): length=%d chars",
                    attempt + 1,
                    len(transcript.strip()),
                )
                return transcript.strip()
            except Exception as e:
                last_error = e
                logger.warning(
                    "OpenAI STT transcription failed (attempt %d/%d): %s",
                    attempt + 1,
                    self.max_retries,
                    e,
                )
                if attempt < self.max_retries - 1:
                    time.sleep(min(self.retry_delay * (2**attempt), 30.0))

        raise TranscriptionError(
            f"Audio transcription failed after {self.max_retries} attempts"
        ) from last_error

    def _validate(self, audio_data: bytes, format: str) -> None:
        if not audio_data:
            raise ValueError("No audio was recorded")
        if len(audio_data) > self.MAX_FILE_SIZE:
            raise ValueError(f"Recording is {len(audio_data)} bytes; Whisper accepts at most 25MB")
        if format not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported audio format: {format} "
                f"(expected one of {', '.join(self.SUPPORTED_FORMATS)})"
            )
