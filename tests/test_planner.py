"""Tests for keyword, OpenAI and fallback planners."""

import json
from unittest.mock import MagicMock

import pytest

from devvoice.commands.intents import Intent
from devvoice.commands.session_memory import SessionMemory, update_memory
from devvoice.config import AppConfig
from devvoice.errors import PlannerError
from devvoice.executor import ExecutionResult
from devvoice.planner import FallbackPlanner, KeywordPlanner, PlannerResult, get_planner
from devvoice.planner.keyword import generate_plan_steps
from devvoice.planner.openai_planner import (
    OpenAIPlanner,
    build_system_prompt,
    parse_model_reply,
)


def mock_client(content: str | None) -> MagicMock:
    """Build a stand-in for openai.OpenAI returning one chat completion."""
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client.chat.completions.create.return_value = response
    return client


@pytest.fixture
def memory() -> SessionMemory:
    return SessionMemory()


@pytest.fixture
def failed_memory() -> SessionMemory:
    memory = SessionMemory()
    update_memory(
        memory,
        Intent.RUN_TESTS,
        ExecutionResult(stdout="", stderr="TypeError: x is undefined", exit_code=1),
        "Tests failed.",
    )
    return memory


class TestKeywordPlanner:
    def test_plan(self, memory: SessionMemory) -> None:
        result = KeywordPlanner().plan("run tests", memory)

        assert result.intent == Intent.RUN_TESTS
        assert result.confidence == 0.9
        assert result.source == "keyword"
        assert result.plan_steps == ["Detect package manager", "Run test suite", "Report results"]
        assert not result.needs_clarification

    def test_unknown_needs_clarification(self, memory: SessionMemory) -> None:
        result = KeywordPlanner().plan("order a pizza", memory)

        assert result.intent == Intent.UNKNOWN
        assert result.needs_clarification

    def test_explain_failure_explanation(self, failed_memory: SessionMemory) -> None:
        result = KeywordPlanner().plan("why did it fail", failed_memory)

        assert result.intent == Intent.EXPLAIN_FAILURE
        assert result.explanation == (
            "The last command (RUN_TESTS) failed with exit code 1. TypeError: x is undefined"
        )

    def test_explain_failure_without_failure(self, memory: SessionMemory) -> None:
        result = KeywordPlanner().plan("why did it fail", memory)
        assert result.explanation is None

    def test_plan_steps_with_parameters(self) -> None:
        assert generate_plan_steps(Intent.CREATE_BRANCH, {"name": "auth"}) == [
            "Create and checkout branch: auth"
        ]
        assert generate_plan_steps(Intent.MAKE_COMMIT, {}) == [
            'Create commit with message: "commit message"'
        ]


class TestParseModelReply:
    def test_valid_reply(self) -> None:
        content = json.dumps(
            {
                "intent": "create_branch",
                "parameters": {"name": "feature-x"},
                "plan_steps": ["Create branch"],
                "confidence": 0.92,
            }
        )

        result = parse_model_reply(content)

        assert result.intent == Intent.CREATE_BRANCH
        assert result.parameters == {"name": "feature-x"}
        assert result.plan_steps == ["Create branch"]
        assert result.confidence == 0.92
        assert result.source == "openai"

    def test_unknown_intent_coerced(self) -> None:
        result = parse_model_reply('{"intent": "DELETE_EVERYTHING", "confidence": 0.99}')
        assert result.intent == Intent.UNKNOWN

    def test_confidence_defaults_and_clamps(self) -> None:
        assert parse_model_reply('{"intent": "HELP"}').confidence == 0.5
        assert parse_model_reply('{"intent": "HELP", "confidence": 7}').confidence == 1.0
        assert parse_model_reply('{"intent": "HELP", "confidence": -2}').confidence == 0.0

    def test_parameters_stringified(self) -> None:
        result = parse_model_reply('{"intent": "MAKE_COMMIT", "parameters": {"message": 42}}')
        assert result.parameters == {"message": "42"}

    def test_clarifying_question(self) -> None:
        result = parse_model_reply(
            '{"intent": "UNKNOWN", "confidence": 0.3, "clarifying_question": "Which branch?"}'
        )
        assert result.needs_clarification
        assert result.clarifying_question == "Which branch?"

    @pytest.mark.parametrize("content", [None, "", "not json", "[1, 2]"])
    def test_invalid_reply(self, content: str | None) -> None:
        with pytest.raises(PlannerError):
            parse_model_reply(content)


class TestOpenAIPlanner:
    def test_plan_uses_json_mode(self, memory: SessionMemory) -> None:
        client = mock_client('{"intent": "GIT_STATUS", "confidence": 0.95}')
        planner = OpenAIPlanner(client=client, model="test-model")

        result = planner.plan("what changed", memory)

        assert result.intent == Intent.GIT_STATUS
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][1]["content"].startswith('User said: "what changed"')

    def test_request_failure_raises_planner_error(self, memory: SessionMemory) -> None:
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("network down")

        with pytest.raises(PlannerError):
            OpenAIPlanner(client=client).plan("run tests", memory)

    def test_system_prompt_includes_failure_context(self, failed_memory: SessionMemory) -> None:
        prompt = build_system_prompt(failed_memory)

        assert "Last failure context" in prompt
        assert "TypeError: x is undefined" in prompt
        assert "Last action: RUN_TESTS" in prompt
        assert "NEVER output raw shell commands" in prompt


class TestFallbackPlanner:
    def test_uses_primary(self, memory: SessionMemory) -> None:
        primary = MagicMock()
        primary.plan.return_value = PlannerResult(
            intent=Intent.HELP, confidence=1.0, source="openai"
        )

        result = FallbackPlanner(primary).plan("anything", memory)

        assert result.source == "openai"

    def test_falls_back_on_planner_error(self, memory: SessionMemory) -> None:
        planner = FallbackPlanner(OpenAIPlanner(client=mock_client("not json")))

        result = planner.plan("git status", memory)

        assert result.intent == Intent.GIT_STATUS
        assert result.source == "keyword"


class TestGetPlanner:
    def test_no_agent(self) -> None:
        config = AppConfig(planner="openai", no_agent=True, openai_api_key="sk-test")
        assert isinstance(get_planner(config), KeywordPlanner)

    def test_keyword_when_no_key(self) -> None:
        assert isinstance(get_planner(AppConfig()), KeywordPlanner)

    def test_explicit_keyword(self) -> None:
        config = AppConfig(planner="keyword", openai_api_key="sk-test")
        assert isinstance(get_planner(config), KeywordPlanner)

    def test_openai_without_key_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert isinstance(get_planner(AppConfig(planner="openai")), KeywordPlanner)
