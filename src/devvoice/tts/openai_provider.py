"""Spoken replies through the OpenAI speech endpoint.

Selected with DEVVOICE_TTS_PROVIDER=openai. Needs the ``openai`` extra and
OPENAI_API_KEY; the voice comes from OPENAI_TTS_VOICE.
"""

import logging
import os
from typing import Any

from devvoice.errors import MissingCredentialError, SynthesisError
from devvoice.tts.provider import TTSProvider, content_type_for

logger = logging.getLogger(__name__)

try:
    import openai

    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False
    openai = None  # type: ignore


class OpenAITTSProvider(TTSProvider):
    SUPPORTED_FORMATS = ("mp3", "opus", "aac", "flac", "wav", "pcm")
    AVAILABLE_VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
        client: Any = None,
    ):
        """Initialize OpenAI TTS provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: TTS model (defaults to OPENAI_TTS_MODEL env var or "tts-1")
            timeout: Request timeout in seconds (default: 30)
            client: Pre-built client, used instead of constructing one
        """
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model or os.environ.get("OPENAI_TTS_MODEL", "tts-1")
        self.timeout = timeout
        self.default_voice = os.environ.get("OPENAI_TTS_VOICE", "alloy")
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
                    "OPENAI_API_KEY environment variable is required for OpenAI TTS provider"
                )
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def synthesize(
        self,
        text: str,
        voice: str | None = None,
        format: str = "mp3",
    ) -> tuple[bytes, str]:
        client = self.client

        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        format_lower = _pick(format.lower(), self.SUPPORTED_FORMATS, "mp3", "format")
        selected_voice = _pick(
            voice or self.default_voice, self.AVAILABLE_VOICES, self.default_voice, "voice"
        )
        logger.debug("Synthesizing %d chars with voice %s", len(text), selected_voice)

        try:
            response = client.audio.speech.create(
                model=self.model,
                voice=selected_voice,
                input=text,
                response_format=format_lower,
                timeout=self.timeout,
            )
            audio_bytes = response.content
        except Exception as e:
            raise SynthesisError(f"TTS synthesis failed: {e}") from e

        return audio_bytes, content_type_for(format_lower)


def _pick(value: str, allowed: tuple[str, ...], fallback: str, label: str) -> str:
    if value in allowed:
        return value
    logger.warning("Unsupported %s '%s', using '%s'", label, value, fallback)
    return fallback
