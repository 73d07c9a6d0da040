"""Confirmation tokens for mutating plans proposed over HTTP.

A voice client that receives ``needs_confirmation`` answers in a second
request. The token issued here ties that answer back to the plan. Tokens are
single use and expire after a short window.
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from .intents import CommandPlan

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass
class PendingAction:
    """A mutating plan awaiting its confirmation utterance.

    Holds the plan only. The command template is resolved again when the
    action is confirmed.
    """

    token: str
    plan: CommandPlan
    session_id: str | None
    repo_path: str
    expires_at: datetime

    @property
    def summary(self) -> str:
        return self.plan.description

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "expires_at": self.expires_at.isoformat(),
            "summary": self.summary,
        }


class PendingActionManager:
    """In-process token store, safe to share between request threads."""

    def __init__(self, default_expiry_seconds: int = 60) -> None:
        self.default_expiry_seconds = default_expiry_seconds
        self._actions: dict[str, PendingAction] = {}
        self._lock = threading.Lock()

    def create(
        self,
        plan: CommandPlan,
        repo_path: str,
        session_id: str | None = None,
        expiry_seconds: int | None = None,
    ) -> PendingAction:
        """Issue a token for ``plan``.

        Args:
            plan: Mutating plan to run once confirmed
            repo_path: Repository the plan targets
            session_id: Session that proposed the plan
            expiry_seconds: Lifetime of the token; defaults to the manager's

        Returns:
            The stored PendingAction
        """
        lifetime = timedelta(seconds=expiry_seconds or self.default_expiry_seconds)
        action = PendingAction(
            token=secrets.token_urlsafe(TOKEN_BYTES),
            plan=plan,
            session_id=session_id,
            repo_path=repo_path,
            expires_at=datetime.now(UTC) + lifetime,
        )
        with self._lock:
            self._actions[action.token] = action
        logger.debug("Issued confirmation token %s for %s", action.token[:8], plan.intent.value)
        return action

    def get(self, token: str) -> PendingAction | None:
        """Look up a live token without using it up."""
        with self._lock:
            return self._live(token)

    def consume(self, token: str) -> PendingAction | None:
        """Take a live token out of the store. A second call returns None."""
        with self._lock:
            action = self._live(token)
            if action is not None:
                del self._actions[token]
            return action

    def cleanup_expired(self) -> int:
        """Drop every expired token and return how many were dropped."""
        now = datetime.now(UTC)
        with self._lock:
            stale = [t for t, action in self._actions.items() if action.is_expired(now)]
            for token in stale:
                del self._actions[token]
        return len(stale)

    def _live(self, token: str) -> PendingAction | None:
        # caller holds the lock
        action = self._actions.get(token)
        if action is not None and action.is_expired():
            del self._actions[token]
            return None
        return action
