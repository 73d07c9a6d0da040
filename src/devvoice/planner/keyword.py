"""Keyword planner: deterministic planning from the intent parser."""

import logging

from devvoice.commands.intent_parser import IntentParser
from devvoice.commands.intents import Intent
from devvoice.commands.session_memory import SessionMemory
from devvoice.planner.base import PlannerResult

logger = logging.getLogger(__name__)


def generate_plan_steps(intent: Intent, parameters: dict[str, str]) -> list[str]:
    """Human-readable steps shown before a command runs."""
    if intent == Intent.RUN_TESTS:
        return ["Detect package manager", "Run test suite", "Report results"]
    if intent == Intent.GIT_STATUS:
        return ["Check git status", "List modified and untracked files"]
    if intent == Intent.RUN_LINT:
        return ["Detect package manager", "Run linter", "Report issues"]
    if intent == Intent.RUN_BUILD:
        return ["Detect package manager", "Build project", "Report build status"]
    if intent == Intent.CREATE_BRANCH:
        return [f"Create and checkout branch: {parameters.get('name') or 'new branch'}"]
    if intent == Intent.MAKE_COMMIT:
        return [f'Create commit with message: "{parameters.get("message") or "commit message"}"']
    if intent == Intent.EXPLAIN_FAILURE:
        return ["Analyze last failure", "Explain error"]
    if intent == Intent.DETAILS:
        return ["Retrieve last command output", "Display details"]
    if intent == Intent.REPEAT_LAST:
        return ["Retrieve last summary", "Repeat summary"]
    if intent == Intent.HELP:
        return ["Display available commands"]
    if intent == Intent.EXIT:
        return ["Exit application"]
    return ["Process request"]


class KeywordPlanner:
    """Planner backed by keyword matching; needs no network or credentials."""

    def __init__(self, parser: IntentParser | None = None):
        self.parser = parser or IntentParser()

    def plan(self, utterance: str, memory: SessionMemory) -> PlannerResult:
        result = self.parser.parse(utterance)

        explanation = None
        failure = memory.last_failure
        if result.intent == Intent.EXPLAIN_FAILURE and failure is not None:
            details = failure.stderr or failure.stdout or "No additional error details available."
            explanation = (
                f"The last command ({failure.intent.value}) failed with exit code "
                f"{failure.exit_code}. {details}"
            )

        logger.debug(
            "Keyword plan: intent=%s, confidence=%.2f", result.intent.value, result.confidence
        )
        return PlannerResult(
            intent=result.intent,
            parameters=result.parameters,
            plan_steps=generate_plan_steps(result.intent, result.parameters),
            explanation=explanation,
            confidence=result.confidence,
            source="keyword",
        )
