"""Speech-to-Text (STT) abstraction layer.

Provides an interface for STT providers with a deterministic stub for tests
and offline use.
"""

import logging
from typing import Protocol

from devvoice.config import AppConfig

logger = logging.getLogger(__name__)


class STTProvider(Protocol):
    """Protocol for STT providers."""

    def transcribe(self, audio_data: bytes, format: str) -> str:
        """Transcribe audio data to text.

        Args:
            audio_data: Raw audio data bytes
            format: Audio format (wav, mp3, ...)

        Returns:
            Transcribed text

        Raises:
            MissingCredentialError: If the provider's API key is not configured
            TranscriptionError: If transcription fails
            ValueError: If the audio is empty or the format is unsupported
        """
        ...


def get_stt_provider(config: AppConfig | None = None) -> STTProvider:
    """Get the configured STT provider.

    Returns the provider named by DEVVOICE_STT_PROVIDER (or the config file):
    - elevenlabs (default): ElevenLabsSTTProvider
    - openai: OpenAISTTProvider
    - stub: StubSTTProvider

    Credentials are checked when transcribing, so a missing key surfaces as a
    MissingCredentialError on the turn rather than at startup.

    Args:
        config: Application config (defaults to AppConfig.from_env())
    """
    config = config or AppConfig.from_env()
    provider_type = config.stt_provider

    if provider_type == "stub":
        from devvoice.stt.stub_provider import StubSTTProvider

        return StubSTTProvider()
    elif provider_type == "openai":
        from devvoice.stt.openai_provider import OpenAISTTProvider

        return OpenAISTTProvider(api_key=config.openai_api_key)
    elif provider_type == "elevenlabs":
        from devvoice.stt.elevenlabs_provider import ElevenLabsSTTProvider

        return ElevenLabsSTTProvider(api_key=config.elevenlabs_api_key)
    else:
        raise ValueError(f"Unknown STT provider: {provider_type}")
