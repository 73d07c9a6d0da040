"""ElevenLabs TTS provider implementation."""

import logging
import os

import httpx

from devvoice.elevenlabs import elevenlabs_url, get_elevenlabs_api_key
from devvoice.errors import SynthesisError
from devvoice.tts.provider import TTSProvider

logger = logging.getLogger(__name__)

DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
TTS_MODEL_ID = "eleven_monolingual_v1"
VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}


class ElevenLabsTTSProvider(TTSProvider):
    """ElevenLabs text-to-speech provider. Always returns MP3 audio."""

    def __init__(self, api_key: str | None = None, timeout: float = 30.0):
        """Initialize ElevenLabs TTS provider.

        Args:
            api_key: ElevenLabs API key (defaults to ELEVENLABS_API_KEY env var)
            timeout: Request timeout in seconds (default: 30)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.default_voice = os.environ.get("ELEVENLABS_VOICE_ID", DEFAULT_VOICE_ID)

    def synthesize(
        self,
        text: str,
        voice: str | None = None,
        format: str = "mp3",
    ) -> tuple[bytes, str]:
        api_key = get_elevenlabs_api_key(self.api_key)

        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        voice_id = voice or self.default_voice
        logger.info("Synthesizing speech: text_length=%d, voice=%s", len(text), voice_id)

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    elevenlabs_url(f"/text-to-speech/{voice_id}"),
                    headers={
                        "Accept": "audio/mpeg",
                        "xi-api-key": api_key,
                    },
                    json={
                        "text": text,
                        "model_id": TTS_MODEL_ID,
                        "voice_settings": VOICE_SETTINGS,
                    },
                )
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SynthesisError(f"Speech synthesis timeout after {self.timeout:g} seconds") from e
        except httpx.HTTPStatusError as e:
            raise SynthesisError(
                f"ElevenLabs API error: {e.response.status_code} {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise SynthesisError(f"Network error during speech synthesis: {e}") from e

        logger.info("Synthesized speech: size=%d bytes", len(response.content))
        return response.content, "audio/mpeg"
