"""Pydantic models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from devvoice.pipeline import TurnStatus


class CommandRequest(BaseModel):
    """A transcribed utterance to run as one turn."""

    text: str = Field(..., min_length=1, max_length=2000)
    repo_path: str | None = Field(
        default=None,
        description="Repository to run in (defaults to the server's repository)",
    )


class ConfirmRequest(BaseModel):
    """Follow-up utterance for a pending mutating action."""

    token: str
    text: str = Field(..., max_length=2000)


class PendingAction(BaseModel):
    """Pending action awaiting confirmation."""

    token: str
    expires_at: datetime
    summary: str


class CommandResponse(BaseModel):
    """Outcome of a turn."""

    status: TurnStatus
    intent: str
    spoken_text: str
    message: str
    plan_description: str | None = None
    plan_steps: list[str] = Field(default_factory=list)
    pending_action: PendingAction | None = None
    command: str | None = None
    exit_code: int | None = None


class TTSRequest(BaseModel):
    """Text-to-speech request."""

    text: str = Field(..., min_length=1, max_length=5000)
    voice: str | None = Field(
        default=None,
        description="Voice identifier (provider-specific)",
    )
    format: str = Field(
        default="mp3",
        description="Audio format (wav, mp3)",
        pattern="^(wav|mp3)$",
    )


class Error(BaseModel):
    """Error response."""

    error: str
    message: str
