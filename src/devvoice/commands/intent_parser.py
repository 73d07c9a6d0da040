"""Intent parser for converting transcripts to structured intents."""

import re
from collections.abc import Callable

from .intents import Intent, IntentResult

SESSION_CONFIDENCE = 1.0
ACTION_CONFIDENCE = 0.9
PARAMETER_CONFIDENCE = 0.8
MISSING_PARAMETER_CONFIDENCE = 0.7

BRANCH_NAME_PATTERNS = [
    re.compile(r"branch (?:called |named )?([a-z0-9\-_]+)", re.IGNORECASE),
    re.compile(r"([a-z0-9\-_]+) branch", re.IGNORECASE),
]

COMMIT_MESSAGE_PATTERNS = [
    re.compile(r"commit (?:with message |message )?[\"']?([^\"']+)[\"']?", re.IGNORECASE),
    re.compile(r"message [\"']?([^\"']+)[\"']?", re.IGNORECASE),
]


def _first_group(patterns: list[re.Pattern[str]], text: str) -> str | None:
    """Return the first capture of the first pattern that matches, stripped."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            value = match.group(1).strip()
            if value:
                return value
    return None


def _extract_branch_name(text: str) -> str | None:
    return _first_group(BRANCH_NAME_PATTERNS, text)


def _extract_commit_message(text: str) -> str | None:
    return _first_group(COMMIT_MESSAGE_PATTERNS, text)


class IntentParser:
    """Classify utterances using ordered keyword rules; the first match wins."""

    def __init__(self) -> None:
        """Initialize the parser with its keyword rules, in priority order."""
        # Keyword rules: (phrases, intent, confidence)
        self.keyword_rules: list[tuple[tuple[str, ...], Intent, float]] = [
            # Session control
            (("exit", "quit", "stop", "bye", "goodbye"), Intent.EXIT, SESSION_CONFIDENCE),
            (("help", "what can you do", "commands", "options"), Intent.HELP, SESSION_CONFIDENCE),
            (
                ("repeat", "say that again", "repeat last", "what did you say"),
                Intent.REPEAT_LAST,
                SESSION_CONFIDENCE,
            ),
            (
                ("details", "more details", "show details", "tell me more", "explain more"),
                Intent.DETAILS,
                SESSION_CONFIDENCE,
            ),
            (
                (
                    "explain failure",
                    "why did it fail",
                    "what went wrong",
                    "explain the error",
                    "what failed",
                ),
                Intent.EXPLAIN_FAILURE,
                SESSION_CONFIDENCE,
            ),
            # Actions
            (
                ("run tests", "test", "tests", "run test suite", "execute tests"),
                Intent.RUN_TESTS,
                ACTION_CONFIDENCE,
            ),
            (
                (
                    "git status",
                    "status",
                    "git state",
                    "what changed",
                    "show changes",
                    "check status",
                ),
                Intent.GIT_STATUS,
                ACTION_CONFIDENCE,
            ),
            (
                ("run lint", "lint", "check lint", "linter", "run linter"),
                Intent.RUN_LINT,
                ACTION_CONFIDENCE,
            ),
            (
                ("run build", "build", "compile", "build project"),
                Intent.RUN_BUILD,
                ACTION_CONFIDENCE,
            ),
        ]

        # Parameterized rules: (trigger regex, trigger phrases, intent, parameter, extractor)
        self.parameter_rules: list[
            tuple[re.Pattern[str], tuple[str, ...], Intent, str, Callable[[str], str | None]]
        ] = [
            (
                re.compile(r"create branch (?:called |named )?([a-z0-9\-_]+)", re.IGNORECASE),
                ("create branch", "new branch", "make branch"),
                Intent.CREATE_BRANCH,
                "name",
                _extract_branch_name,
            ),
            (
                COMMIT_MESSAGE_PATTERNS[0],
                ("commit", "make commit", "create commit"),
                Intent.MAKE_COMMIT,
                "message",
                _extract_commit_message,
            ),
        ]

    def parse(self, text: str) -> IntentResult:
        """Parse an utterance into an intent.

        Args:
            text: User input text (transcript or typed command)

        Returns:
            IntentResult with intent, confidence, and extracted parameters
        """
        normalized = text.lower().strip()

        for phrases, intent, confidence in self.keyword_rules:
            if any(phrase in normalized for phrase in phrases):
                return IntentResult(intent=intent, confidence=confidence)

        for trigger, phrases, intent, parameter, extractor in self.parameter_rules:
            match = trigger.search(normalized)
            if not match and not any(phrase in normalized for phrase in phrases):
                continue

            value = match.group(1).strip() if match else extractor(normalized)
            if value:
                return IntentResult(
                    intent=intent,
                    confidence=PARAMETER_CONFIDENCE,
                    parameters={parameter: value},
                )
            # Keyword matched but the value is missing; the resolver will refuse
            return IntentResult(intent=intent, confidence=MISSING_PARAMETER_CONFIDENCE)

        return IntentResult(intent=Intent.UNKNOWN, confidence=0.0)

    def classify(self, text: str) -> IntentResult:
        """Alias for parse()."""
        return self.parse(text)
