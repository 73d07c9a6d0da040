"""ElevenLabs API helpers shared by the speech-to-text and text-to-speech providers."""

import os

from devvoice.errors import MissingCredentialError

ELEVENLABS_API_BASE = "https://api.elevenlabs.io/v1"


def get_elevenlabs_api_key(api_key: str | None = None) -> str:
    """Return the ElevenLabs API key.

    Args:
        api_key: Explicit key; falls back to ELEVENLABS_API_KEY

    Raises:
        MissingCredentialError: If no key is configured
    """
    key = api_key or os.environ.get("ELEVENLABS_API_KEY")
    if not key:
        raise MissingCredentialError(
            "ELEVENLABS_API_KEY not set. Please set it in your environment or config file."
        )
    return key


def elevenlabs_url(path: str) -> str:
    base = os.environ.get("ELEVENLABS_API_BASE", ELEVENLABS_API_BASE).rstrip("/")
    return f"{base}/{path.lstrip('/')}"
