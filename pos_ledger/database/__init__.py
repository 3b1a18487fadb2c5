# pos_ledger/database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from ..config import DB_PATH
from . import schema as schema_module
from .versioning import stamp_version

MEMORY = ":memory:"


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases)
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the schema is applied idempotently and the version row exists.

    Pass ":memory:" for a throwaway ledger.
    """
    target = DB_PATH if db_path is None else db_path
    if str(target) != MEMORY:
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(target))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if str(target) != MEMORY:
        conn.execute("PRAGMA journal_mode = WAL;")

    # Always apply the schema (idempotent: CREATE IF NOT EXISTS / DROP TRIGGER IF EXISTS)
    schema_module.apply_schema(conn)
    stamp_version(conn)
    return conn


__all__ = [
    "get_connection",
]
