"""TTS provider interface."""

from abc import ABC, abstractmethod

CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/opus",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
    "pcm": "audio/pcm",
}

# content type -> file extension for saved audio
EXTENSIONS = {content_type: fmt for fmt, content_type in CONTENT_TYPES.items()}


def content_type_for(format: str) -> str:
    return CONTENT_TYPES.get(format.lower(), "audio/mpeg")


class TTSProvider(ABC):
    """Abstract base class for TTS providers."""

    @abstractmethod
    def synthesize(
        self,
        text: str,
        voice: str | None = None,
        format: str = "mp3",
    ) -> tuple[bytes, str]:
        """Synthesize speech from text.

        Args:
            text: Text to convert to speech
            voice: Optional voice identifier
            format: Audio format (mp3, wav, etc.)

        Returns:
            Tuple of (audio_bytes, content_type)

        Raises:
            MissingCredentialError: If the provider's API key is not configured
            SynthesisError: If synthesis fails
        """
