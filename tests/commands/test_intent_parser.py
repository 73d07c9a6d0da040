"""Tests for intent parser."""

import pytest

from devvoice.commands.intent_parser import IntentParser
from devvoice.commands.intents import Intent


@pytest.fixture
def parser() -> IntentParser:
    """Create an intent parser instance."""
    return IntentParser()


class TestSessionIntents:
    """Test session control intents."""

    @pytest.mark.parametrize("phrase", ["exit", "quit", "stop", "bye", "goodbye"])
    def test_exit(self, parser: IntentParser, phrase: str) -> None:
        result = parser.parse(phrase)
        assert result.intent == Intent.EXIT
        assert result.confidence == 1.0
        assert result.parameters == {}

    @pytest.mark.parametrize("phrase", ["help", "what can you do", "commands", "options"])
    def test_help(self, parser: IntentParser, phrase: str) -> None:
        result = parser.parse(phrase)
        assert result.intent == Intent.HELP
        assert result.confidence == 1.0

    def test_repeat(self, parser: IntentParser) -> None:
        for phrase in ["repeat", "say that again", "what did you say"]:
            result = parser.parse(phrase)
            assert result.intent == Intent.REPEAT_LAST
            assert result.confidence == 1.0

    def test_details(self, parser: IntentParser) -> None:
        for phrase in ["details", "show details", "tell me more", "explain more"]:
            result = parser.parse(phrase)
            assert result.intent == Intent.DETAILS
            assert result.confidence == 1.0

    def test_explain_failure(self, parser: IntentParser) -> None:
        for phrase in ["explain failure", "why did it fail", "what went wrong", "what failed"]:
            result = parser.parse(phrase)
            assert result.intent == Intent.EXPLAIN_FAILURE
            assert result.confidence == 1.0


class TestActionIntents:
    """Test intents that map to commands."""

    @pytest.mark.parametrize(
        ("phrase", "intent"),
        [
            ("run tests", Intent.RUN_TESTS),
            ("execute tests", Intent.RUN_TESTS),
            ("git status", Intent.GIT_STATUS),
            ("what changed", Intent.GIT_STATUS),
            ("show changes", Intent.GIT_STATUS),
            ("run lint", Intent.RUN_LINT),
            ("linter", Intent.RUN_LINT),
            ("run build", Intent.RUN_BUILD),
            ("compile", Intent.RUN_BUILD),
        ],
    )
    def test_action_keywords(self, parser: IntentParser, phrase: str, intent: Intent) -> None:
        result = parser.parse(phrase)
        assert result.intent == intent
        assert result.confidence == 0.9
        assert result.parameters == {}

    def test_case_and_whitespace_insensitive(self, parser: IntentParser) -> None:
        result = parser.parse("  Run TESTS please  ")
        assert result.intent == Intent.RUN_TESTS

    def test_priority_order_session_before_action(self, parser: IntentParser) -> None:
        """A session keyword wins over an action keyword in the same utterance."""
        result = parser.parse("explain more about the build")
        assert result.intent == Intent.DETAILS


class TestCreateBranch:
    """Test branch creation intent and name extraction."""

    def test_with_name(self, parser: IntentParser) -> None:
        result = parser.parse("create branch feature-login")
        assert result.intent == Intent.CREATE_BRANCH
        assert result.confidence == 0.8
        assert result.parameters == {"name": "feature-login"}

    def test_called(self, parser: IntentParser) -> None:
        result = parser.parse("create branch called auth-fix")
        assert result.intent == Intent.CREATE_BRANCH
        assert result.parameters == {"name": "auth-fix"}

    def test_make_branch_named(self, parser: IntentParser) -> None:
        result = parser.parse("make branch named hotfix_2")
        assert result.intent == Intent.CREATE_BRANCH
        assert result.parameters == {"name": "hotfix_2"}


class TestMakeCommit:
    """Test commit intent and message extraction."""

    def test_with_quoted_message(self, parser: IntentParser) -> None:
        result = parser.parse('commit with message "fix login bug"')
        assert result.intent == Intent.MAKE_COMMIT
        assert result.confidence == 0.8
        assert result.parameters == {"message": "fix login bug"}

    def test_with_bare_message(self, parser: IntentParser) -> None:
        result = parser.parse("commit message update readme")
        assert result.intent == Intent.MAKE_COMMIT
        assert result.parameters == {"message": "update readme"}

    def test_without_message(self, parser: IntentParser) -> None:
        for phrase in ["commit", "make commit", "create commit"]:
            result = parser.parse(phrase)
            assert result.intent == Intent.MAKE_COMMIT
            assert result.confidence == 0.7
            assert result.parameters == {}


class TestUnknown:
    """Test utterances with no recognizable keyword."""

    @pytest.mark.parametrize("phrase", ["order a pizza", "", "   ", "deploy to production"])
    def test_unknown(self, parser: IntentParser, phrase: str) -> None:
        result = parser.classify(phrase)
        assert result.intent == Intent.UNKNOWN
        assert result.confidence == 0.0
        assert result.parameters == {}
