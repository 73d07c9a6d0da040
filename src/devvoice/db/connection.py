"""DuckDB connection management for the action log."""

import os
from pathlib import Path

import duckdb

from devvoice.config import DEFAULT_DB_PATH


def get_db_path() -> str:
    """Get the database file path from DEVVOICE_DB_PATH or the default."""
    return os.getenv("DEVVOICE_DB_PATH") or DEFAULT_DB_PATH


def get_connection(db_path: str | None = None) -> duckdb.DuckDBPyConnection:
    """Open a DuckDB connection.

    Args:
        db_path: Database file path, or ":memory:". Defaults to get_db_path().
    """
    if db_path is None:
        db_path = get_db_path()

    if db_path != ":memory:":
        Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        db_path = str(Path(db_path).expanduser())

    return duckdb.connect(db_path)


def init_db(db_path: str | None = None) -> duckdb.DuckDBPyConnection:
    """Open a connection and bring the schema up to date."""
    conn = get_connection(db_path=db_path)

    from devvoice.db.migrations import run_migrations

    run_migrations(conn)
    return conn
