"""Whitelist command resolver.

Maps an intent and its parameters to a concrete argument-vector command, or
refuses. The repository is inspected only to decide which package manager and
which scripts exist: the manifest's ``scripts`` mapping and lockfile presence.
"""

import json
import logging
import re
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .intents import Intent

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"

# Lockfile -> package manager, checked in order
LOCKFILES = [
    ("pnpm-lock.yaml", "pnpm"),
    ("package-lock.json", "npm"),
]

_BRANCH_NAME_DISALLOWED = re.compile(r"[^A-Za-z0-9_\-]")

StagedProbe = Callable[[str], bool]


@dataclass(frozen=True)
class CommandTemplate:
    """An executable plus discrete, pre-sanitized arguments.

    Never joined into a shell string.
    """

    executable: str
    args: tuple[str, ...]
    cwd: str

    def display(self) -> str:
        """Human-readable rendering for logs and console output."""
        return " ".join([self.executable, *self.args])


class RefusalReason(str, Enum):
    """Why a command could not be resolved."""

    NOT_AVAILABLE = "not_available"
    NOTHING_STAGED = "nothing_staged"
    MISSING_PARAMETER = "missing_parameter"


@dataclass(frozen=True)
class ResolutionRefusal:
    """A precondition was not met; distinct from a command that ran and failed."""

    intent: Intent
    reason: RefusalReason

    @property
    def message(self) -> str:
        """User-facing explanation."""
        if self.reason == RefusalReason.NOTHING_STAGED:
            return "Cannot commit: no staged changes. Please stage files first using git add."
        return (
            f"Cannot execute {self.intent.value}. Command not available or parameters missing."
        )


def sanitize_branch_name(name: str) -> str:
    """Keep only ``[A-Za-z0-9_-]``."""
    return _BRANCH_NAME_DISALLOWED.sub("", name)


def escape_commit_message(message: str) -> str:
    """Escape embedded double quotes; the message stays a single argument."""
    return message.replace('"', '\\"')


def detect_package_manager(repo_path: str | Path) -> str | None:
    """Pick a package manager from lockfile presence.

    Returns:
        "pnpm", "npm", or None when there is no manifest or no known lockfile
    """
    root = Path(repo_path)
    if not (root / MANIFEST_FILE).is_file():
        return None
    for lockfile, manager in LOCKFILES:
        if (root / lockfile).exists():
            return manager
    return None


def read_scripts(repo_path: str | Path) -> dict[str, str]:
    """Read the manifest's ``scripts`` mapping; unreadable manifests have none."""
    manifest = Path(repo_path) / MANIFEST_FILE
    try:
        with manifest.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Could not read %s: %s", manifest, e)
        return {}
    scripts = data.get("scripts") if isinstance(data, dict) else None
    if not isinstance(scripts, dict):
        return {}
    return {str(k): str(v) for k, v in scripts.items()}


def has_staged_changes(repo_path: str) -> bool:
    """Probe the index for staged changes without touching repository state.

    ``git diff --cached --quiet`` exits 0 when nothing is staged; any other
    outcome is treated as staged changes existing.
    """
    try:
        completed = subprocess.run(
            ["git", "diff", "--cached", "--quiet"],
            cwd=repo_path,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        logger.warning("Staged-change probe failed to start: %s", e)
        return True
    return completed.returncode != 0


def _script_template(
    intent: Intent, script: str, repo_path: str
) -> CommandTemplate | ResolutionRefusal:
    manager = detect_package_manager(repo_path)
    if manager is None or script not in read_scripts(repo_path):
        return ResolutionRefusal(intent=intent, reason=RefusalReason.NOT_AVAILABLE)

    # npm and pnpm both run "test" directly; other scripts need "run" under npm
    if script == "test" or manager == "pnpm":
        args: tuple[str, ...] = (script,)
    else:
        args = ("run", script)
    return CommandTemplate(executable=manager, args=args, cwd=repo_path)


def resolve(
    intent: Intent,
    parameters: dict[str, str] | None,
    repo_path: str,
    *,
    staged_probe: StagedProbe | None = None,
) -> CommandTemplate | ResolutionRefusal:
    """Resolve an intent into a whitelisted command.

    Args:
        intent: The classified intent
        parameters: Extracted parameters (``name`` for branches, ``message`` for commits)
        repo_path: Repository root the command runs in
        staged_probe: Override for the staged-change check (defaults to git)

    Returns:
        A fresh CommandTemplate, or a ResolutionRefusal explaining why not
    """
    params = parameters or {}
    probe = staged_probe or has_staged_changes

    if intent == Intent.RUN_TESTS:
        return _script_template(intent, "test", repo_path)
    if intent == Intent.RUN_LINT:
        return _script_template(intent, "lint", repo_path)
    if intent == Intent.RUN_BUILD:
        return _script_template(intent, "build", repo_path)
    if intent == Intent.GIT_STATUS:
        return CommandTemplate(executable="git", args=("status", "--porcelain"), cwd=repo_path)
    if intent == Intent.CREATE_BRANCH:
        branch = sanitize_branch_name(params.get("name") or "")
        if not branch:
            return ResolutionRefusal(intent=intent, reason=RefusalReason.MISSING_PARAMETER)
        return CommandTemplate(executable="git", args=("checkout", "-b", branch), cwd=repo_path)
    if intent == Intent.MAKE_COMMIT:
        message = params.get("message") or ""
        if not message.strip():
            return ResolutionRefusal(intent=intent, reason=RefusalReason.MISSING_PARAMETER)
        if not probe(repo_path):
            return ResolutionRefusal(intent=intent, reason=RefusalReason.NOTHING_STAGED)
        return CommandTemplate(
            executable="git",
            args=("commit", "-m", escape_commit_message(message)),
            cwd=repo_path,
        )
    if intent in (
        Intent.EXPLAIN_FAILURE,
        Intent.DETAILS,
        Intent.REPEAT_LAST,
        Intent.HELP,
        Intent.EXIT,
        Intent.UNKNOWN,
    ):
        return ResolutionRefusal(intent=intent, reason=RefusalReason.NOT_AVAILABLE)
    raise ValueError(f"Unhandled intent: {intent!r}")
