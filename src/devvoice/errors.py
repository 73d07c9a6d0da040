"""Exception types shared across DevVoice components."""


class DevVoiceError(Exception):
    """Base class for DevVoice errors."""


class InvalidRepositoryError(DevVoiceError):
    """Raised when the working repository path does not exist or is not a directory."""


class MissingCredentialError(DevVoiceError):
    """Raised when a collaborator needs an API key that is not configured."""


class TranscriptionError(DevVoiceError):
    """Raised when speech-to-text fails after the provider gave up."""


class SynthesisError(DevVoiceError):
    """Raised when text-to-speech fails."""


class PlannerError(DevVoiceError):
    """Raised when the external planner cannot produce a usable result."""


class GateAlreadySettledError(DevVoiceError):
    """Raised when a confirmation gate is evaluated a second time."""


class RecordingError(DevVoiceError):
    """Raised when the microphone could not be recorded."""
