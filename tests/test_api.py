"""Tests for the HTTP API."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from devvoice import api
from devvoice.api import EXPIRED_MESSAGE, app
from devvoice.commands.whitelist import CommandTemplate
from devvoice.config import AppConfig
from devvoice.executor import ExecutionResult
from devvoice.metrics import get_metrics_collector
from devvoice.pipeline import HELP_MESSAGE

client = TestClient(app)


def post_command(text: str, repo: Path, session_id: str | None = None):
    headers = {"X-Session-Id": session_id} if session_id else {}
    return client.post(
        "/v1/command", json={"text": text, "repo_path": str(repo)}, headers=headers
    )


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestCommand:
    def test_help(self, npm_repo: Path) -> None:
        response = post_command("help", npm_repo)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["intent"] == "HELP"
        assert data["spoken_text"] == HELP_MESSAGE
        assert data["pending_action"] is None

    def test_refused(self, empty_repo: Path) -> None:
        data = post_command("run tests", empty_repo).json()

        assert data["status"] == "refused"
        assert data["intent"] == "RUN_TESTS"
        assert data["command"] is None

    def test_invalid_repository(self, tmp_path: Path) -> None:
        response = post_command("git status", tmp_path / "missing")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_repository"

    def test_empty_text_rejected(self, npm_repo: Path) -> None:
        response = client.post("/v1/command", json={"text": "", "repo_path": str(npm_repo)})
        assert response.status_code == 422

    def test_sessions_are_isolated(self, npm_repo: Path) -> None:
        post_command("git status", npm_repo, session_id="session-a")

        repeat_a = post_command("repeat", npm_repo, session_id="session-a").json()
        repeat_b = post_command("repeat", npm_repo, session_id="session-b").json()

        assert repeat_a["spoken_text"] != "No previous summary to repeat."
        assert repeat_b["spoken_text"] == "No previous summary to repeat."

    def test_exit_clears_session(self, npm_repo: Path) -> None:
        post_command("git status", npm_repo, session_id="session-exit")

        data = post_command("exit", npm_repo, session_id="session-exit").json()
        repeat = post_command("repeat", npm_repo, session_id="session-exit").json()

        assert data["status"] == "exit"
        assert repeat["spoken_text"] == "No previous summary to repeat."


class TestConfirmation:
    def test_mutating_command_returns_token(self, npm_repo: Path) -> None:
        data = post_command("create branch feature-login", npm_repo).json()

        assert data["status"] == "needs_confirmation"
        assert data["command"] == "git checkout -b feature-login"
        pending = data["pending_action"]
        assert pending["token"]
        assert pending["summary"] == "Create branch: feature-login"

    def test_cancel_consumes_token(self, npm_repo: Path) -> None:
        token = post_command("create branch feature-login", npm_repo).json()["pending_action"][
            "token"
        ]

        cancelled = client.post("/v1/commands/confirm", json={"token": token, "text": "no"})
        again = client.post("/v1/commands/confirm", json={"token": token, "text": "confirm"})

        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert again.status_code == 404
        assert again.json() == {"error": "not_found", "message": EXPIRED_MESSAGE}

    def test_confirm_executes(self, npm_repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        executed: list[CommandTemplate] = []

        def fake_execute(template: CommandTemplate, timeout: float | None = None):
            executed.append(template)
            return ExecutionResult(stdout="", stderr="", exit_code=0)

        monkeypatch.setattr("devvoice.pipeline.execute_command", fake_execute)
        token = post_command("create branch feature-login", npm_repo).json()["pending_action"][
            "token"
        ]

        response = client.post("/v1/commands/confirm", json={"token": token, "text": "confirm"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "executed"
        assert data["command"] == "git checkout -b feature-login"
        assert data["exit_code"] == 0
        assert executed[0].args == ("checkout", "-b", "feature-login")
        assert executed[0].cwd == str(npm_repo.resolve())

    def test_unknown_token(self) -> None:
        response = client.post(
            "/v1/commands/confirm", json={"token": "no-such-token", "text": "confirm"}
        )

        assert response.status_code == 404
        assert response.json()["message"] == EXPIRED_MESSAGE


class TestTTS:
    def test_stub_audio(self) -> None:
        response = client.post("/v1/tts", json={"text": "All tests passed"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert response.content[:4] == b"RIFF"

    def test_blank_text(self) -> None:
        response = client.post("/v1/tts", json={"text": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    def test_invalid_format(self) -> None:
        response = client.post("/v1/tts", json={"text": "hi", "format": "ogg"})
        assert response.status_code == 422

    def test_missing_credential(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
        monkeypatch.setattr(api, "_config", AppConfig(tts_provider="elevenlabs"))

        response = client.post("/v1/tts", json={"text": "hello"})

        assert response.status_code == 503
        assert response.json()["error"] == "tts_unavailable"


class TestMetrics:
    def test_disabled_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(api, "_config", AppConfig())

        response = client.get("/v1/metrics")

        assert response.status_code == 404

    def test_enabled_from_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "devvoice.yaml"
        config_file.write_text("enable_metrics: true\n")
        config = AppConfig.from_env(environ={}, config_path=str(config_file))
        monkeypatch.setattr(api, "_config", config)

        response = client.get("/v1/metrics")

        assert response.status_code == 200

    def test_enabled(self, npm_repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(api, "_config", AppConfig(enable_metrics=True))
        get_metrics_collector().reset()

        post_command("help", npm_repo)
        client.post("/v1/commands/confirm", json={"token": "expired", "text": "yes"})
        response = client.get("/v1/metrics")

        assert response.status_code == 200
        snapshot = response.json()
        assert snapshot["intent_counts"]["HELP"] == 1
        assert snapshot["status_counts"]["ok"] == 1
        assert snapshot["confirmation_outcomes"] == {"expired": 1}
