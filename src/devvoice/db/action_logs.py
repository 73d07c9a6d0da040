"""Audit log of executed commands.

Only commands are recorded. Session memory itself is never persisted.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

import duckdb


@dataclass
class ActionLog:
    """One executed command."""

    id: str
    session_id: str | None
    intent: str
    command: str
    exit_code: int
    ok: bool
    duration_ms: float | None
    created_at: datetime


def write_action_log(
    conn: duckdb.DuckDBPyConnection,
    session_id: str | None,
    intent: str,
    command: str,
    exit_code: int,
    ok: bool,
    duration_ms: float | None = None,
) -> ActionLog:
    """Write an action log entry.

    Args:
        conn: Database connection.
        session_id: Session that ran the command (None for the CLI).
        intent: Intent name, e.g. "RUN_TESTS".
        command: Display form of the executed command.
        exit_code: Process exit code.
        ok: Whether the command succeeded.
        duration_ms: Wall-clock duration.

    Returns:
        Created ActionLog object.
    """
    log_id = str(uuid.uuid4())
    # Stored as naive UTC
    now = datetime.now(UTC).replace(tzinfo=None)

    conn.execute(
        """
        INSERT INTO action_logs
        (id, session_id, intent, command, exit_code, ok, duration_ms, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [log_id, session_id, intent, command, exit_code, ok, duration_ms, now],
    )

    return ActionLog(
        id=log_id,
        session_id=session_id,
        intent=intent,
        command=command,
        exit_code=exit_code,
        ok=ok,
        duration_ms=duration_ms,
        created_at=now,
    )


def get_action_logs(
    conn: duckdb.DuckDBPyConnection,
    session_id: str | None = None,
    limit: int = 50,
) -> list[ActionLog]:
    """Query action logs, newest first.

    Args:
        conn: Database connection.
        session_id: Filter by session.
        limit: Maximum number of logs to return.
    """
    query = (
        "SELECT id, session_id, intent, command, exit_code, ok, duration_ms, created_at "
        "FROM action_logs"
    )
    params: list[object] = []

    if session_id:
        query += " WHERE session_id = ?"
        params.append(session_id)

    query += " ORDER BY created_at DESC LIMIT ?"
    params.append(limit)

    return [
        ActionLog(
            id=str(row[0]),
            session_id=row[1],
            intent=row[2],
            command=row[3],
            exit_code=row[4],
            ok=row[5],
            duration_ms=row[6],
            created_at=row[7],
        )
        for row in conn.execute(query, params).fetchall()
    ]
