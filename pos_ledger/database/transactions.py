# pos_ledger/database/transactions.py
from __future__ import annotations

from contextlib import contextmanager
import logging
import sqlite3
from typing import Iterator

from .errors import ConstraintViolation, StorageFailure

_log = logging.getLogger(__name__)


@contextmanager
def immediate_tx(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Start an IMMEDIATE transaction (write lock taken up front),
    commit on success, rollback on any error.

    sqlite3 errors are translated at this boundary:
      - IntegrityError  -> ConstraintViolation
      - any other Error -> StorageFailure
    Everything else (e.g. ValidationError raised mid-flight) is re-raised as-is
    after the rollback.
    """
    cur = conn.cursor()
    try:
        cur.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except sqlite3.IntegrityError as e:
        conn.rollback()
        raise ConstraintViolation(str(e)) from e
    except sqlite3.Error as e:
        conn.rollback()
        _log.error("Transaction rolled back after storage failure: %s", e)
        _log.debug("Storage failure detail", exc_info=True)
        raise StorageFailure(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
