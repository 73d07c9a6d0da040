"""Session memory for follow-up commands (repeat, details, explain failure).

Memory lives for one multi-turn session and is never persisted. Hosts that
serve several sessions keep one isolated SessionMemory per session id in a
SessionStore.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .intents import Intent

if TYPE_CHECKING:
    from devvoice.executor import ExecutionResult

logger = logging.getLogger(__name__)

DETAILS_LINE_LIMIT = 20
FAILURE_LINE_LIMIT = 3

NO_FAILURE_MESSAGE = "No failure recorded. Last command succeeded."
NO_PREVIOUS_ACTION_MESSAGE = "No previous action to show details for."
NO_OUTPUT_MESSAGE = "No output available from last action."
NOTHING_TO_REPEAT_MESSAGE = "No previous summary to repeat."


@dataclass(frozen=True)
class FailureRecord:
    """Output of the most recent failing execution."""

    intent: Intent
    stdout: str
    stderr: str
    exit_code: int


@dataclass
class SessionMemory:
    """The last completed action of a session, its output and its summary."""

    last_action: Intent | None = None
    last_stdout: str = ""
    last_stderr: str = ""
    last_exit_code: int = 0
    last_summary: str = ""
    last_failure: FailureRecord | None = None

    def context(self) -> dict[str, object]:
        """Compact view of the session for the planner prompt."""
        failure = None
        if self.last_failure is not None:
            failure = {
                "intent": self.last_failure.intent.value,
                "exit_code": self.last_failure.exit_code,
                "stderr": self.last_failure.stderr,
                "stdout": self.last_failure.stdout,
            }
        return {
            "last_action": self.last_action.value if self.last_action else None,
            "last_summary": self.last_summary or None,
            "last_failure": failure,
        }


def update_memory(
    memory: SessionMemory,
    intent: Intent,
    result: "ExecutionResult",
    summary: str,
) -> None:
    """Record a completed execution.

    The last_* fields are always overwritten. last_failure is only set when the
    execution failed and is never cleared by a later success, so it always
    describes the most recent failing action.
    """
    memory.last_action = intent
    memory.last_stdout = result.stdout
    memory.last_stderr = result.stderr
    memory.last_exit_code = result.exit_code
    memory.last_summary = summary

    if not result.success:
        memory.last_failure = FailureRecord(
            intent=intent,
            stdout=result.stdout,
            stderr=result.stderr,
            exit_code=result.exit_code,
        )


def _non_empty_lines(text: str, limit: int) -> list[str]:
    return [line for line in text.split("\n") if line.strip()][:limit]


def explain_failure(memory: SessionMemory) -> str:
    """Describe the most recent failing action."""
    failure = memory.last_failure
    if failure is None:
        return NO_FAILURE_MESSAGE

    explanation = (
        f"Last failure was during {failure.intent.value}. Exit code: {failure.exit_code}."
    )
    if failure.stderr:
        explanation += " Error: " + ". ".join(_non_empty_lines(failure.stderr, FAILURE_LINE_LIMIT))
    elif failure.stdout:
        explanation += " Output: " + ". ".join(
            _non_empty_lines(failure.stdout, FAILURE_LINE_LIMIT)
        )
    return explanation


def get_details(memory: SessionMemory) -> str:
    """Return the tail of the last action's output (stdout preferred)."""
    if memory.last_action is None:
        return NO_PREVIOUS_ACTION_MESSAGE

    output = memory.last_stdout or memory.last_stderr
    if not output:
        return NO_OUTPUT_MESSAGE

    return "\n".join(output.split("\n")[-DETAILS_LINE_LIMIT:])


class SessionStore:
    """Keeps one isolated SessionMemory per session id."""

    def __init__(self) -> None:
        self._memories: dict[str, SessionMemory] = {}

    def get(self, session_id: str) -> SessionMemory:
        """Return the memory for a session, creating an empty one on first use."""
        memory = self._memories.get(session_id)
        if memory is None:
            memory = SessionMemory()
            self._memories[session_id] = memory
            logger.debug("Created session memory for %s", session_id[:8])
        return memory

    def clear(self, session_id: str) -> None:
        """Drop a session's memory when the session ends."""
        if session_id in self._memories:
            del self._memories[session_id]

    def __len__(self) -> int:
        return len(self._memories)
