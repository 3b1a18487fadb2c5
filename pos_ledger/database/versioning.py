# pos_ledger/database/versioning.py
import logging
import sqlite3

from ..constants import SCHEMA_VERSION, TABLE_SCHEMA_VERSION

_log = logging.getLogger(__name__)


def _ensure_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)


def get_current_version(conn: sqlite3.Connection) -> str | None:
    _ensure_table(conn)
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;").fetchone()
    return row[0] if row else None


def stamp_version(conn: sqlite3.Connection, expected: str = SCHEMA_VERSION) -> str:
    """
    Record `expected` on a fresh database; on an existing one, return what is stored.

    There is no migration path: a stored version that differs from `expected`
    is only reported, the file is left untouched.
    """
    current = get_current_version(conn)
    if current is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (expected,),
        )
        conn.commit()
        return expected
    if current != expected:
        _log.warning(
            "Database schema version %s differs from application version %s; no migration is applied.",
            current,
            expected,
        )
    return current
