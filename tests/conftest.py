# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own SQLite file under tmp_path (schema applied
#   by get_connection, foreign_keys ON, row_factory = sqlite3.Row)
# - Time is controlled through the `clock` fixture; repos that stamp
#   or window by date share it
# - `ledger_counts` snapshots row counts + balances for atomicity checks
# ---------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
import sqlite3

import pytest

from pos_ledger.database import get_connection
from pos_ledger.database.repositories import (
    CustomersRepo,
    DebtPaymentsRepo,
    ProductsRepo,
    ReportingRepo,
    SalesRepo,
)

LEDGER_TABLES = ("products", "customers", "sales", "sale_items", "debt_payments")


class FakeClock:
    """Callable stand-in for datetime.now that tests can move around."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 10, 30, 0))


@pytest.fixture()
def conn(tmp_path):
    con = get_connection(tmp_path / "shop.db")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def products(conn) -> ProductsRepo:
    return ProductsRepo(conn)


@pytest.fixture()
def customers(conn) -> CustomersRepo:
    return CustomersRepo(conn)


@pytest.fixture()
def sales(conn, clock) -> SalesRepo:
    return SalesRepo(conn, clock=clock)


@pytest.fixture()
def payments(conn, clock) -> DebtPaymentsRepo:
    return DebtPaymentsRepo(conn, clock=clock)


@pytest.fixture()
def reporting(conn, clock) -> ReportingRepo:
    return ReportingRepo(conn, clock=clock)


@pytest.fixture()
def ledger_counts(conn):
    """Return a function that snapshots row counts, stocks and balances."""
    def snapshot() -> dict:
        snap: dict = {t: conn.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0] for t in LEDGER_TABLES}
        snap["stock"] = {
            r[0]: r[1] for r in conn.execute("SELECT product_id, stock FROM products").fetchall()
        }
        snap["debt"] = {
            r[0]: r[1] for r in conn.execute("SELECT customer_id, total_debt FROM customers").fetchall()
        }
        return snap
    return snapshot


@pytest.fixture()
def ids(products, customers) -> dict:
    """A small catalogue and two customers used across suites."""
    return {
        "tea": products.create("Tea", Decimal("10"), barcode="1001", stock=5),
        "sugar": products.create("Sugar", Decimal("15"), barcode="1002", stock=20, unit="kg"),
        "soap": products.create("Soap", Decimal("2.25"), barcode=None, stock=3),
        "amal": customers.create("Amal", "0100000001"),
        "omar": customers.create("Omar"),
    }


def one(conn: sqlite3.Connection, sql: str, *params):
    r = conn.execute(sql, params).fetchone()
    return None if r is None else r[0]
