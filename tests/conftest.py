"""pytest configuration for DevVoice tests."""

import json
import os
import sys
from pathlib import Path

import pytest

# Add src directory to path so tests can import devvoice
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Keep the action log in memory for test isolation
os.environ["DEVVOICE_DB_PATH"] = ":memory:"
# Never reach real speech services from tests
os.environ["DEVVOICE_STT_PROVIDER"] = "stub"
os.environ["DEVVOICE_TTS_PROVIDER"] = "stub"
os.environ["DEVVOICE_PLANNER"] = "keyword"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("ELEVENLABS_API_KEY", None)


def make_repo(
    root: Path,
    scripts: dict[str, str] | None = None,
    lockfile: str | None = "package-lock.json",
) -> Path:
    """Create a fake JavaScript project with a manifest and optional lockfile."""
    root.mkdir(parents=True, exist_ok=True)
    manifest = {"name": "demo", "version": "1.0.0", "scripts": scripts or {}}
    (root / "package.json").write_text(json.dumps(manifest))
    if lockfile:
        (root / lockfile).write_text("")
    return root


@pytest.fixture
def npm_repo(tmp_path: Path) -> Path:
    """An npm project with test, lint and build scripts."""
    return make_repo(
        tmp_path / "npm-repo",
        scripts={"test": "jest", "lint": "eslint .", "build": "tsc"},
    )


@pytest.fixture
def pnpm_repo(tmp_path: Path) -> Path:
    """A pnpm project with test, lint and build scripts."""
    return make_repo(
        tmp_path / "pnpm-repo",
        scripts={"test": "vitest", "lint": "eslint .", "build": "vite build"},
        lockfile="pnpm-lock.yaml",
    )


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    """A directory with no manifest at all."""
    path = tmp_path / "empty-repo"
    path.mkdir()
    return path


@pytest.fixture
def repo_factory(tmp_path: Path):
    """Build fake projects under tmp_path: ``repo_factory("name", scripts=..., lockfile=...)``."""

    def factory(name: str = "repo", **kwargs) -> Path:
        return make_repo(tmp_path / name, **kwargs)

    return factory
