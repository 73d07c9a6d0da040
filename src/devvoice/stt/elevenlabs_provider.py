"""ElevenLabs STT provider implementation.

Uses the ElevenLabs batch speech-to-text endpoint through httpx.
"""

import logging
from typing import Any

import httpx

from devvoice.elevenlabs import elevenlabs_url, get_elevenlabs_api_key
from devvoice.errors import TranscriptionError

logger = logging.getLogger(__name__)

STT_MODEL_ID = "scribe_v1"


def extract_transcript(payload: Any) -> str:
    """Pull the transcript out of an STT response.

    The API returns either ``{"text": ...}`` or
    ``{"transcripts": {"channel_0": ...}}``.

    Raises:
        TranscriptionError: If neither shape is present
    """
    if isinstance(payload, dict):
        text = payload.get("text")
        if isinstance(text, str) and text:
            return text.strip()

        transcripts = payload.get("transcripts")
        if isinstance(transcripts, dict):
            channel = transcripts.get("channel_0")
            if isinstance(channel, str) and channel:
                return channel.strip()

    raise TranscriptionError(f"Unexpected API response format: {str(payload)[:200]}")


class ElevenLabsSTTProvider:
    """ElevenLabs speech-to-text provider with a request timeout."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        language_code: str = "en",
    ):
        """Initialize ElevenLabs STT provider.

        Args:
            api_key: ElevenLabs API key (defaults to ELEVENLABS_API_KEY env var)
            timeout: Request timeout in seconds (default: 60)
            language_code: Spoken language hint
        """
        self.api_key = api_key
        self.timeout = timeout
        self.language_code = language_code

    def transcribe(self, audio_data: bytes, format: str) -> str:
        """Transcribe audio with the ElevenLabs speech-to-text API.

        Raises:
            MissingCredentialError: If ELEVENLABS_API_KEY is not set
            TranscriptionError: On timeout, HTTP error or unexpected response
            ValueError: If audio data is empty
        """
        api_key = get_elevenlabs_api_key(self.api_key)

        if not audio_data:
            raise ValueError("Audio data cannot be empty")

        logger.info("Transcribing audio: format=%s, size=%d bytes", format, len(audio_data))

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    elevenlabs_url("/speech-to-text"),
                    headers={"xi-api-key": api_key},
                    files={"file": (f"audio.{format}", audio_data, f"audio/{format}")},
                    data={
                        "model_id": STT_MODEL_ID,
                        "language_code": self.language_code,
                        "webhook": "false",
                    },
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            raise TranscriptionError(f"Transcription timeout after {self.timeout:g} seconds") from e
        except httpx.HTTPStatusError as e:
            raise TranscriptionError(
                f"ElevenLabs STT API error: {e.response.status_code} "
                f"{e.response.reason_phrase}. Response: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise TranscriptionError(f"Network error during transcription: {e}") from e
        except ValueError as e:
            raise TranscriptionError("ElevenLabs STT returned invalid JSON") from e

        transcript = extract_transcript(payload)
        logger.info("Transcribed audio: length=%d chars", len(transcript))
        return transcript
