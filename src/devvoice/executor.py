"""Execution collaborator: runs a resolved command template without a shell."""

import logging
import subprocess
import time
from dataclasses import dataclass

from devvoice.commands.whitelist import CommandTemplate

logger = logging.getLogger(__name__)

SPAWN_FAILURE_EXIT_CODE = 1
TIMEOUT_EXIT_CODE = 124


@dataclass(frozen=True)
class ExecutionResult:
    """Output of one command execution."""

    stdout: str
    stderr: str
    exit_code: int
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def _decode(payload: bytes | str | None) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    return payload.decode("utf-8", errors="replace")


def execute_command(template: CommandTemplate, timeout: float | None = None) -> ExecutionResult:
    """Run a command template and collect its output.

    Spawn failures (e.g. executable not found) and timeouts are reported as
    non-zero exits with the reason in stderr rather than raised.

    Args:
        template: Whitelisted executable, argument list and working directory
        timeout: Optional wall-clock ceiling in seconds

    Returns:
        ExecutionResult with trimmed stdout/stderr
    """
    logger.info("Executing %s in %s", template.display(), template.cwd)
    started = time.monotonic()
    try:
        completed = subprocess.run(
            [template.executable, *template.args],
            cwd=template.cwd,
            capture_output=True,
            timeout=timeout,
            check=False,
            shell=False,
        )
    except subprocess.TimeoutExpired as exc:
        reason = f"Command timed out after {timeout} seconds"
        stderr = _decode(exc.stderr).strip()
        logger.warning("%s: %s", reason, template.display())
        return ExecutionResult(
            stdout=_decode(exc.stdout).strip(),
            stderr=f"{stderr}\n{reason}" if stderr else reason,
            exit_code=TIMEOUT_EXIT_CODE,
            duration_seconds=time.monotonic() - started,
        )
    except OSError as e:
        logger.warning("Failed to start %s: %s", template.executable, e)
        return ExecutionResult(
            stdout="",
            stderr=str(e),
            exit_code=SPAWN_FAILURE_EXIT_CODE,
            duration_seconds=time.monotonic() - started,
        )

    result = ExecutionResult(
        stdout=_decode(completed.stdout).strip(),
        stderr=_decode(completed.stderr).strip(),
        exit_code=completed.returncode,
        duration_seconds=time.monotonic() - started,
    )
    logger.info(
        "Command finished: exit_code=%d, duration=%.2fs",
        result.exit_code,
        result.duration_seconds,
    )
    return result
