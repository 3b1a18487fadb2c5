from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CORE TABLES ======================== */
/* Money columns hold integer minor units (MONEY_PLACES = 2: 1250 == 12.50).  */
/* Timestamps are local wall-clock text 'YYYY-MM-DD HH:MM:SS'.                */

/* -------- inventory -------- */
CREATE TABLE IF NOT EXISTS products (
    product_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name       TEXT    NOT NULL CHECK (length(trim(name)) > 0),
    price      INTEGER NOT NULL CHECK (price >= 0),
    barcode    TEXT UNIQUE,
    /* may go negative: sales never reserve stock */
    stock      INTEGER NOT NULL DEFAULT 0,
    unit       TEXT    NOT NULL DEFAULT 'unit'
);

/* -------- parties -------- */
CREATE TABLE IF NOT EXISTS customers (
    customer_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL CHECK (length(trim(name)) > 0),
    phone       TEXT,
    /* running balance: + credit sales, - debt payments; negative == credit owed */
    total_debt  INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_customers_name ON customers(name);

/* -------- sales -------- */
CREATE TABLE IF NOT EXISTS sales (
    sale_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id    INTEGER NULL,
    total_amount   INTEGER NOT NULL CHECK (total_amount >= 0),
    payment_method TEXT    NOT NULL DEFAULT 'cash' CHECK (payment_method IN ('cash','credit')),
    date           TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%S', 'now', 'localtime')),
    CHECK (
        (payment_method = 'credit' AND customer_id IS NOT NULL) OR
        (payment_method = 'cash'   AND customer_id IS NULL)
    ),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
);
CREATE INDEX IF NOT EXISTS idx_sales_date     ON sales(date);
CREATE INDEX IF NOT EXISTS idx_sales_customer ON sales(customer_id);

CREATE TABLE IF NOT EXISTS sale_items (
    item_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id       INTEGER NOT NULL,
    product_id    INTEGER NOT NULL,
    quantity      INTEGER NOT NULL CHECK (quantity > 0),
    price_at_sale INTEGER NOT NULL CHECK (price_at_sale >= 0),
    FOREIGN KEY (sale_id)    REFERENCES sales(sale_id),
    FOREIGN KEY (product_id) REFERENCES products(product_id)
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale    ON sale_items(sale_id);
CREATE INDEX IF NOT EXISTS idx_sale_items_product ON sale_items(product_id);

/* -------- collections -------- */
CREATE TABLE IF NOT EXISTS debt_payments (
    payment_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id  INTEGER NOT NULL,
    amount_paid  INTEGER NOT NULL CHECK (amount_paid > 0),
    payment_date TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%S', 'now', 'localtime')),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
);
CREATE INDEX IF NOT EXISTS idx_debt_payments_customer ON debt_payments(customer_id);
CREATE INDEX IF NOT EXISTS idx_debt_payments_date     ON debt_payments(payment_date);

/* ======================== APPEND-ONLY GUARDS ======================== */
/* Sales, their items and debt payments are immutable once written. */

DROP TRIGGER IF EXISTS trg_sales_no_update;
CREATE TRIGGER trg_sales_no_update
BEFORE UPDATE ON sales
BEGIN
    SELECT RAISE(ABORT, 'sales are immutable');
END;

DROP TRIGGER IF EXISTS trg_sales_no_delete;
CREATE TRIGGER trg_sales_no_delete
BEFORE DELETE ON sales
BEGIN
    SELECT RAISE(ABORT, 'sales are immutable');
END;

DROP TRIGGER IF EXISTS trg_sale_items_no_update;
CREATE TRIGGER trg_sale_items_no_update
BEFORE UPDATE ON sale_items
BEGIN
    SELECT RAISE(ABORT, 'sale items are immutable');
END;

DROP TRIGGER IF EXISTS trg_sale_items_no_delete;
CREATE TRIGGER trg_sale_items_no_delete
BEFORE DELETE ON sale_items
BEGIN
    SELECT RAISE(ABORT, 'sale items are immutable');
END;

DROP TRIGGER IF EXISTS trg_debt_payments_no_update;
CREATE TRIGGER trg_debt_payments_no_update
BEFORE UPDATE ON debt_payments
BEGIN
    SELECT RAISE(ABORT, 'debt payments are immutable');
END;

DROP TRIGGER IF EXISTS trg_debt_payments_no_delete;
CREATE TRIGGER trg_debt_payments_no_delete
BEFORE DELETE ON debt_payments
BEGIN
    SELECT RAISE(ABORT, 'debt payments are immutable');
END;
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection and commit."""
    conn.executescript(SQL)
    conn.commit()


def init_schema(db_path: Path | str = "shop.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
    finally:
        conn.close()
    _log.info("Schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[2] / "data" / "shop.db"
    init_schema(target)
