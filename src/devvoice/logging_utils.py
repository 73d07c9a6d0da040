"""Logging utilities: secret redaction and per-turn structured context.

API keys for OpenAI and ElevenLabs travel through provider errors and debug
output, so anything logged through these helpers is redacted first.
"""

import logging
import os
import re
import uuid
from contextvars import ContextVar
from typing import Any

_turn_id_var: ContextVar[str | None] = ContextVar("turn_id", default=None)

REDACTED = "***REDACTED***"

SECRET_PATTERNS = [
    (re.compile(r"sk-(?:proj-)?[A-Za-z0-9_\-]{8,}"), f"sk-{REDACTED}"),
    (
        re.compile(r"(xi-api-key['\"]?[:=\s]+['\"]?)([^\s,;'\"]+)", re.IGNORECASE),
        rf"\1{REDACTED}",
    ),
    (
        re.compile(
            r"(Authorization['\"]?[:=\s]+['\"]?(?:Bearer\s+)?)([^\s,;'\"]+)", re.IGNORECASE
        ),
        rf"\1{REDACTED}",
    ),
]


def redact_secrets(text: Any) -> str:
    """Redact API keys and auth header values from text.

    Args:
        text: Value that may contain secrets

    Returns:
        String with secrets replaced
    """
    if text is None:
        return ""

    text = str(text)
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def new_turn_id() -> str:
    """Start a new turn and return its id."""
    turn_id = uuid.uuid4().hex[:12]
    _turn_id_var.set(turn_id)
    return turn_id


def get_turn_id() -> str | None:
    return _turn_id_var.get()


def clear_turn_id() -> None:
    _turn_id_var.set(None)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **kwargs: Any,
) -> None:
    """Log ``message | turn_id=... | key=value`` with every value redacted.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.ERROR, etc.)
        message: Log message
        **kwargs: Additional structured fields to include
    """
    parts = [redact_secrets(message)]

    turn_id = get_turn_id()
    if turn_id:
        parts.append(f"turn_id={turn_id}")

    parts.extend(f"{key}={redact_secrets(value)}" for key, value in kwargs.items())
    logger.log(level, " | ".join(parts))


def log_info(logger: logging.Logger, message: str, **kwargs: Any) -> None:
    log_with_context(logger, logging.INFO, message, **kwargs)


def log_warning(logger: logging.Logger, message: str, **kwargs: Any) -> None:
    log_with_context(logger, logging.WARNING, message, **kwargs)


def log_error(logger: logging.Logger, message: str, **kwargs: Any) -> None:
    log_with_context(logger, logging.ERROR, message, **kwargs)


def log_debug(logger: logging.Logger, message: str, **kwargs: Any) -> None:
    log_with_context(logger, logging.DEBUG, message, **kwargs)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the CLI and server entry points.

    Args:
        level: Level name; defaults to the LOG_LEVEL env var, then WARNING
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
