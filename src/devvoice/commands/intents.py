"""Intent types and command plans shared by the command pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Intent(str, Enum):
    """Closed set of user goals the assistant recognizes."""

    RUN_TESTS = "RUN_TESTS"
    GIT_STATUS = "GIT_STATUS"
    RUN_LINT = "RUN_LINT"
    RUN_BUILD = "RUN_BUILD"
    CREATE_BRANCH = "CREATE_BRANCH"
    MAKE_COMMIT = "MAKE_COMMIT"
    EXPLAIN_FAILURE = "EXPLAIN_FAILURE"
    DETAILS = "DETAILS"
    REPEAT_LAST = "REPEAT_LAST"
    HELP = "HELP"
    EXIT = "EXIT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def coerce(cls, value: Any) -> "Intent":
        """Map an arbitrary value onto the closed set, defaulting to UNKNOWN."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


# Intents answered from session state without running a command
SESSION_INTENTS = frozenset(
    {
        Intent.EXIT,
        Intent.HELP,
        Intent.REPEAT_LAST,
        Intent.DETAILS,
        Intent.EXPLAIN_FAILURE,
        Intent.UNKNOWN,
    }
)

# Intents that mutate the repository and must pass the confirmation gate
MUTATING_INTENTS = frozenset({Intent.CREATE_BRANCH, Intent.MAKE_COMMIT})


@dataclass
class IntentResult:
    """Structured representation of a classified utterance."""

    intent: Intent
    confidence: float
    parameters: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "name": self.intent.value,
            "confidence": self.confidence,
            "parameters": dict(self.parameters),
        }


@dataclass(frozen=True)
class CommandPlan:
    """What the assistant intends to do for an intent, before resolution."""

    intent: Intent
    description: str
    requires_confirmation: bool
    parameters: dict[str, str] = field(default_factory=dict)


def _describe(intent: Intent, parameters: dict[str, str]) -> str:
    if intent == Intent.RUN_TESTS:
        return "Run test suite"
    if intent == Intent.GIT_STATUS:
        return "Check git status"
    if intent == Intent.RUN_LINT:
        return "Run linter"
    if intent == Intent.RUN_BUILD:
        return "Build project"
    if intent == Intent.CREATE_BRANCH:
        name = parameters.get("name")
        return f"Create branch: {name}" if name else "Create new branch"
    if intent == Intent.MAKE_COMMIT:
        message = parameters.get("message")
        return f'Commit with message: "{message}"' if message else "Create commit"
    if intent == Intent.EXPLAIN_FAILURE:
        return "Explain last failure"
    if intent == Intent.DETAILS:
        return "Show more details about last output"
    if intent == Intent.REPEAT_LAST:
        return "Repeat last summary"
    if intent == Intent.HELP:
        return "Show help"
    if intent == Intent.EXIT:
        return "Exit"
    if intent == Intent.UNKNOWN:
        return "Unknown command"
    raise ValueError(f"Unhandled intent: {intent!r}")


def create_plan(result: IntentResult) -> CommandPlan:
    """Derive the command plan for a classified utterance."""
    parameters = dict(result.parameters)
    return CommandPlan(
        intent=result.intent,
        description=_describe(result.intent, parameters),
        requires_confirmation=result.intent in MUTATING_INTENTS,
        parameters=parameters,
    )
