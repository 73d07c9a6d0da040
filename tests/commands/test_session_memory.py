"""Tests for session memory and follow-up answers."""

import pytest

from devvoice.commands.intents import Intent
from devvoice.commands.session_memory import (
    NO_FAILURE_MESSAGE,
    NO_OUTPUT_MESSAGE,
    NO_PREVIOUS_ACTION_MESSAGE,
    SessionMemory,
    SessionStore,
    explain_failure,
    get_details,
    update_memory,
)
from devvoice.executor import ExecutionResult


def result(stdout: str = "", stderr: str = "", exit_code: int = 0) -> ExecutionResult:
    return ExecutionResult(stdout=stdout, stderr=stderr, exit_code=exit_code, duration_seconds=0.1)


@pytest.fixture
def memory() -> SessionMemory:
    return SessionMemory()


class TestUpdateMemory:
    """Test recording executions."""

    def test_records_last_action(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.GIT_STATUS, result(stdout=" M a.txt"), "One file modified")

        assert memory.last_action == Intent.GIT_STATUS
        assert memory.last_stdout == " M a.txt"
        assert memory.last_exit_code == 0
        assert memory.last_summary == "One file modified"
        assert memory.last_failure is None

    def test_records_failure(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_TESTS, result(stderr="boom", exit_code=1), "Tests failed")

        assert memory.last_failure is not None
        assert memory.last_failure.intent == Intent.RUN_TESTS
        assert memory.last_failure.exit_code == 1
        assert memory.last_failure.stderr == "boom"

    def test_failure_survives_later_success(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_TESTS, result(stderr="boom", exit_code=1), "Tests failed")
        update_memory(memory, Intent.GIT_STATUS, result(stdout=""), "Clean")

        assert memory.last_action == Intent.GIT_STATUS
        assert memory.last_exit_code == 0
        assert memory.last_failure is not None
        assert memory.last_failure.intent == Intent.RUN_TESTS

    def test_later_failure_replaces_earlier(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_TESTS, result(exit_code=1), "Tests failed")
        update_memory(memory, Intent.RUN_LINT, result(stderr="lint error", exit_code=2), "Lint")

        assert memory.last_failure is not None
        assert memory.last_failure.intent == Intent.RUN_LINT

    def test_context(self, memory: SessionMemory) -> None:
        assert memory.context() == {
            "last_action": None,
            "last_summary": None,
            "last_failure": None,
        }

        update_memory(memory, Intent.RUN_BUILD, result(stderr="err", exit_code=2), "Build failed")
        context = memory.context()

        assert context["last_action"] == "RUN_BUILD"
        assert context["last_summary"] == "Build failed"
        assert context["last_failure"] == {
            "intent": "RUN_BUILD",
            "exit_code": 2,
            "stderr": "err",
            "stdout": "",
        }


class TestExplainFailure:
    def test_no_failure(self, memory: SessionMemory) -> None:
        assert explain_failure(memory) == NO_FAILURE_MESSAGE

    def test_no_failure_after_success(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.GIT_STATUS, result(), "Clean")
        assert explain_failure(memory) == "No failure recorded. Last command succeeded."

    def test_uses_first_three_stderr_lines(self, memory: SessionMemory) -> None:
        stderr = "line one\n\nline two\nline three\nline four"
        update_memory(memory, Intent.RUN_TESTS, result(stderr=stderr, exit_code=1), "Tests failed")

        assert explain_failure(memory) == (
            "Last failure was during RUN_TESTS. Exit code: 1. "
            "Error: line one. line two. line three"
        )

    def test_falls_back_to_stdout(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_LINT, result(stdout="bad indent", exit_code=1), "Lint")

        assert explain_failure(memory) == (
            "Last failure was during RUN_LINT. Exit code: 1. Output: bad indent"
        )

    def test_no_output(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_BUILD, result(exit_code=127), "Build failed")

        assert explain_failure(memory) == "Last failure was during RUN_BUILD. Exit code: 127."


class TestGetDetails:
    def test_no_previous_action(self, memory: SessionMemory) -> None:
        assert get_details(memory) == NO_PREVIOUS_ACTION_MESSAGE

    def test_no_output(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.GIT_STATUS, result(), "Clean")
        assert get_details(memory) == NO_OUTPUT_MESSAGE

    def test_last_twenty_lines(self, memory: SessionMemory) -> None:
        stdout = "\n".join(f"line {i}" for i in range(1, 26))
        update_memory(memory, Intent.RUN_TESTS, result(stdout=stdout), "Tests passed")

        details = get_details(memory)

        lines = details.split("\n")
        assert len(lines) == 20
        assert lines[0] == "line 6"
        assert lines[-1] == "line 25"

    def test_prefers_stdout(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_BUILD, result(stdout="out", stderr="err"), "Built")
        assert get_details(memory) == "out"

    def test_uses_stderr_when_stdout_empty(self, memory: SessionMemory) -> None:
        update_memory(memory, Intent.RUN_BUILD, result(stderr="warn", exit_code=0), "Built")
        assert get_details(memory) == "warn"


class TestSessionStore:
    """Sessions never share memory."""

    def test_get_creates_empty_memory(self) -> None:
        store = SessionStore()
        memory = store.get("a")

        assert memory.last_action is None
        assert store.get("a") is memory
        assert len(store) == 1

    def test_sessions_isolated(self) -> None:
        store = SessionStore()
        update_memory(store.get("a"), Intent.RUN_TESTS, result(exit_code=1), "Tests failed")

        assert store.get("b").last_failure is None
        assert explain_failure(store.get("b")) == NO_FAILURE_MESSAGE
        assert store.get("a").last_failure is not None

    def test_clear(self) -> None:
        store = SessionStore()
        update_memory(store.get("a"), Intent.GIT_STATUS, result(), "Clean")

        store.clear("a")
        store.clear("missing")

        assert len(store) == 0
        assert store.get("a").last_action is None
