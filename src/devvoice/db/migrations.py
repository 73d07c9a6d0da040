"""Schema migrations for the action log database."""

import logging

import duckdb

logger = logging.getLogger(__name__)

# (version, sql), applied in order
MIGRATIONS = [
    (
        "001_action_logs",
        """
        CREATE TABLE IF NOT EXISTS action_logs (
            id TEXT PRIMARY KEY,
            session_id TEXT,
            intent TEXT NOT NULL,
            command TEXT NOT NULL,
            exit_code INTEGER NOT NULL,
            ok BOOLEAN NOT NULL,
            duration_ms DOUBLE,
            created_at TIMESTAMP NOT NULL
        )
        """,
    ),
    (
        "002_action_logs_session_index",
        "CREATE INDEX IF NOT EXISTS idx_action_logs_session ON action_logs (session_id)",
    ),
]


def run_migrations(conn: duckdb.DuckDBPyConnection) -> list[str]:
    """Apply pending migrations.

    Returns:
        Versions applied by this call
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )

    applied = {row[0] for row in conn.execute("SELECT version FROM schema_migrations").fetchall()}

    newly_applied = []
    for version, sql in MIGRATIONS:
        if version in applied:
            continue
        conn.execute(sql)
        conn.execute("INSERT INTO schema_migrations (version) VALUES (?)", [version])
        logger.info("Applied migration: %s", version)
        newly_applied.append(version)

    return newly_applied
