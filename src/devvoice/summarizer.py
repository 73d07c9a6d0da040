"""Per-intent summaries of command output, short enough to speak.

Every summarizer is total: missing or malformed output degrades to a generic
phrase instead of raising.
"""

import re

from devvoice.commands.intents import Intent
from devvoice.executor import ExecutionResult

GIT_STATUS_FILE_LIMIT = 5
GENERIC_LINE_LIMIT = 3

_FAILED_COUNT = [
    re.compile(r"(\d+) failed", re.IGNORECASE),
    re.compile(r"(\d+) failing", re.IGNORECASE),
]
_PASSED_COUNT = [
    re.compile(r"(\d+) passed", re.IGNORECASE),
    re.compile(r"(\d+) passing", re.IGNORECASE),
]
_TEST_FAILURE_MARKER = re.compile(r"(?:FAIL|Error|✕|×)\s+([^\n]+)", re.IGNORECASE)
_LINT_ERROR_BLOCK = re.compile(
    r"(?:error|warning|✖|×)\s+([^\n]+(?:\n[^\n]+){0,3})", re.IGNORECASE
)
_BUILD_ERROR_BLOCK = re.compile(
    r"(?:error|failed|✖|×)\s+([^\n]+(?:\n[^\n]+){0,3})", re.IGNORECASE
)


def _combined_output(result: ExecutionResult) -> str:
    return f"{result.stdout}\n{result.stderr}"


def _first_count(patterns: list[re.Pattern[str]], text: str, default: str) -> str:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return default


def _plural(count: str, noun: str) -> str:
    return f"{count} {noun}{'' if count == '1' else 's'}"


def _first_block_line(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    block = match.group(1).strip()
    return block.split("\n")[0] if block else None


def summarize_tests(result: ExecutionResult) -> str:
    """Summarize a test run: counts and the first failure marker."""
    if not result.success:
        output = _combined_output(result)
        failed = _first_count(_FAILED_COUNT, output, "some")
        passed = _first_count(_PASSED_COUNT, output, "0")

        summary = f"Tests failed. {_plural(failed, 'test')} failed, {passed} passed."
        match = _TEST_FAILURE_MARKER.search(output)
        if match:
            summary += f" First failure: {match.group(1).strip()}"
        return summary

    passed = _first_count(_PASSED_COUNT, result.stdout, "all")
    return f"All tests passed. {_plural(passed, 'test')} passed."


def summarize_git_status(result: ExecutionResult) -> str:
    """Summarize ``git status --porcelain`` output."""
    if not result.success:
        return f"Git status failed: {result.stderr or 'Unknown error'}"

    lines = [line for line in result.stdout.split("\n") if line.strip()]
    if not lines:
        return "Working directory is clean. No changes."

    modified: list[str] = []
    untracked: list[str] = []
    for line in lines:
        # Leading status space may already be trimmed from the first line
        status, _, filename = line.strip().partition(" ")
        filename = filename.strip()
        if status == "??":
            untracked.append(filename)
        elif status:
            modified.append(filename)

    summary = f"Found {_plural(str(len(modified)), 'modified file')}"
    if untracked:
        summary += f" and {_plural(str(len(untracked)), 'untracked file')}"
    summary += "."

    listed = (modified + untracked)[:GIT_STATUS_FILE_LIMIT]
    if listed:
        summary += f" Files: {', '.join(listed)}"
        total = len(modified) + len(untracked)
        if total > GIT_STATUS_FILE_LIMIT:
            summary += f" and {total - GIT_STATUS_FILE_LIMIT} more"
    return summary


def summarize_lint(result: ExecutionResult) -> str:
    """Summarize a lint run."""
    if not result.success:
        first_error = _first_block_line(_LINT_ERROR_BLOCK, _combined_output(result))
        if first_error:
            return f"Lint failed. First error: {first_error}"
        return "Lint failed. Check output for details."
    return "Lint passed. No issues found."


def summarize_build(result: ExecutionResult) -> str:
    """Summarize a build run."""
    if not result.success:
        first_error = _first_block_line(_BUILD_ERROR_BLOCK, _combined_output(result))
        if first_error:
            return f"Build failed. First error: {first_error}"
        return "Build failed. Check output for details."

    output = result.stdout.lower()
    if "success" in output or "built" in output:
        return "Build succeeded."
    return "Build completed successfully."


def summarize_generic(result: ExecutionResult) -> str:
    """Fallback summary for commands without a dedicated summarizer."""
    if not result.success:
        error = result.stderr or result.stdout or "Unknown error"
        return f"Command failed: {error.split(chr(10))[0].strip()}"

    output = result.stdout.strip()
    if not output:
        return "Command completed successfully."
    return ". ".join(output.split("\n")[:GENERIC_LINE_LIMIT])


def summarize(intent: Intent, result: ExecutionResult) -> str:
    """Summarize command output according to the intent that produced it."""
    if intent == Intent.RUN_TESTS:
        return summarize_tests(result)
    if intent == Intent.GIT_STATUS:
        return summarize_git_status(result)
    if intent == Intent.RUN_LINT:
        return summarize_lint(result)
    if intent == Intent.RUN_BUILD:
        return summarize_build(result)
    return summarize_generic(result)
