"""TTS (Text-to-Speech) module for DevVoice."""

import logging

from devvoice.config import AppConfig
from devvoice.tts.provider import TTSProvider
from devvoice.tts.stub_provider import StubTTSProvider

logger = logging.getLogger(__name__)

__all__ = ["TTSProvider", "StubTTSProvider", "get_tts_provider"]


def get_tts_provider(config: AppConfig | None = None) -> TTSProvider:
    """Get the configured TTS provider.

    Returns the provider named by DEVVOICE_TTS_PROVIDER (or the config file):
    - elevenlabs (default): ElevenLabsTTSProvider
    - openai: OpenAITTSProvider
    - stub: StubTTSProvider

    Args:
        config: Application config (defaults to AppConfig.from_env())
    """
    config = config or AppConfig.from_env()
    provider_type = config.tts_provider

    if provider_type == "stub":
        return StubTTSProvider()
    elif provider_type == "openai":
        from devvoice.tts.openai_provider import OpenAITTSProvider

        return OpenAITTSProvider(api_key=config.openai_api_key)
    elif provider_type == "elevenlabs":
        from devvoice.tts.elevenlabs_provider import ElevenLabsTTSProvider

        return ElevenLabsTTSProvider(api_key=config.elevenlabs_api_key)
    else:
        logger.warning("Unknown TTS provider '%s', falling back to stub", provider_type)
        return StubTTSProvider()
