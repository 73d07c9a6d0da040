"""DuckDB-backed action log."""

from devvoice.db.action_logs import ActionLog, get_action_logs, write_action_log
from devvoice.db.connection import get_connection, get_db_path, init_db
from devvoice.db.migrations import run_migrations

__all__ = [
    "ActionLog",
    "get_action_logs",
    "get_connection",
    "get_db_path",
    "init_db",
    "run_migrations",
    "write_action_log",
]
