"""DevVoice: voice-driven control of a local development workflow."""

__version__ = "0.1.0"
