"""FastAPI backend for DevVoice.

Serves the same turn pipeline as the CLI over HTTP. Each X-Session-Id gets its
own session memory; mutating commands are confirmed with a second request
carrying the pending action token.
"""

import logging
import os
from pathlib import Path

import duckdb
from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from devvoice.commands.pending_actions import PendingActionManager
from devvoice.commands.session_memory import SessionStore
from devvoice.config import AppConfig
from devvoice.db import init_db
from devvoice.errors import MissingCredentialError, SynthesisError
from devvoice.metrics import get_metrics_collector
from devvoice.models import (
    CommandRequest,
    CommandResponse,
    ConfirmRequest,
    PendingAction,
    TTSRequest,
)
from devvoice.pipeline import TurnOutcome, TurnStatus, VoicePipeline
from devvoice.planner import Planner, get_planner
from devvoice.tts import get_tts_provider

logger = logging.getLogger(__name__)

app = FastAPI(
    title="DevVoice API",
    version="0.1.0",
    description="Voice-first developer assistant for local git repositories",
)

EXPIRED_MESSAGE = "That confirmation has expired or was not found."
DEFAULT_SESSION_ID = "default"

_config: AppConfig | None = None
_planner: Planner | None = None
_db_conn: duckdb.DuckDBPyConnection | None = None
_session_store = SessionStore()
_pending_action_manager = PendingActionManager()


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def get_db() -> duckdb.DuckDBPyConnection:
    """Get or initialize the action log connection.

    Uses DEVVOICE_DB_PATH; tests set it to :memory: in conftest.py.
    """
    global _db_conn
    if _db_conn is None:
        _db_conn = init_db(get_config().db_path)
    return _db_conn


def get_shared_planner() -> Planner:
    global _planner
    if _planner is None:
        _planner = get_planner(get_config())
    return _planner


def _resolve_repo_path(requested: str | None) -> str:
    repo_path = requested or os.environ.get("DEVVOICE_REPO_PATH") or os.getcwd()
    if not Path(repo_path).is_dir():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_repository",
                "message": f"Repository path does not exist: {repo_path}",
            },
        )
    return str(Path(repo_path).resolve())


def build_pipeline(repo_path: str) -> VoicePipeline:
    config = get_config()
    return VoicePipeline(
        repo_path,
        planner=get_shared_planner(),
        command_timeout=config.command_timeout,
        action_log=get_db(),
        metrics=get_metrics_collector() if config.enable_metrics else None,
    )


def _to_response(outcome: TurnOutcome, pending: PendingAction | None = None) -> CommandResponse:
    return CommandResponse(
        status=outcome.status,
        intent=outcome.intent.value,
        spoken_text=outcome.spoken_text,
        message=outcome.message,
        plan_description=outcome.plan.description if outcome.plan else None,
        plan_steps=outcome.plan_steps,
        pending_action=pending,
        command=outcome.command,
        exit_code=outcome.result.exit_code if outcome.result else None,
    )


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/v1/command", response_model=CommandResponse)
def submit_command(
    request: CommandRequest,
    x_session_id: str | None = Header(default=None, alias="X-Session-Id"),
) -> CommandResponse:
    """Run one turn for a transcribed utterance.

    Args:
        request: Utterance and optional repository path
        x_session_id: Session identifier; sessions never share memory

    Returns:
        CommandResponse; NEEDS_CONFIRMATION responses carry a pending action token
    """
    session_id = x_session_id or DEFAULT_SESSION_ID
    repo_path = _resolve_repo_path(request.repo_path)
    memory = _session_store.get(session_id)

    outcome = build_pipeline(repo_path).handle(request.text.strip(), memory, session_id)

    pending = None
    if outcome.needs_confirmation and outcome.plan is not None:
        action = _pending_action_manager.create(
            outcome.plan, repo_path=repo_path, session_id=session_id
        )
        pending = PendingAction(
            token=action.token, expires_at=action.expires_at, summary=action.summary
        )
        logger.info("Created pending action %s for %s", action.token[:8], outcome.intent.value)

    if outcome.should_exit:
        _session_store.clear(session_id)

    return _to_response(outcome, pending)


@app.post("/v1/commands/confirm", response_model=CommandResponse)
def confirm_command(request: ConfirmRequest) -> CommandResponse:
    """Settle a pending action with the follow-up utterance.

    Tokens are single use: a token is consumed whether the follow-up confirms
    or cancels.
    """
    action = _pending_action_manager.consume(request.token)
    if action is None:
        if get_config().enable_metrics:
            get_metrics_collector().record_confirmation("expired")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "message": EXPIRED_MESSAGE},
        )

    session_id = action.session_id or DEFAULT_SESSION_ID
    memory = _session_store.get(session_id)

    outcome = build_pipeline(action.repo_path).confirm(
        action.plan, request.text, memory, session_id
    )
    if outcome.status == TurnStatus.EXECUTED:
        logger.info("Executed confirmed action %s", request.token[:8])
    return _to_response(outcome)


@app.post("/v1/tts")
def text_to_speech(request: TTSRequest) -> Response:
    """Convert text to speech audio with the configured TTS provider."""
    if not request.text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_input", "message": "Text cannot be empty"},
        )

    provider = get_tts_provider(get_config())
    try:
        audio_bytes, content_type = provider.synthesize(
            text=request.text,
            voice=request.voice,
            format=request.format,
        )
    except MissingCredentialError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "tts_unavailable", "message": str(e)},
        ) from e
    except SynthesisError as e:
        logger.error("TTS synthesis failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "synthesis_failed", "message": "Failed to synthesize speech"},
        ) from e

    extension = "wav" if content_type == "audio/wav" else "mp3"
    return Response(
        content=audio_bytes,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="speech.{extension}"'},
    )


@app.get("/v1/metrics")
def get_metrics():
    """Metrics snapshot; 404 unless metrics are enabled in the configuration."""
    if not get_config().enable_metrics:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "message": "Metrics are disabled"},
        )
    return get_metrics_collector().get_snapshot()


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return HTTPException details in the Error schema."""
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "message": str(exc.detail)},
    )
