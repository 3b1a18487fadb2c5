# pos_ledger/database/repositories/reporting_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
import sqlite3

from ...constants import (
    HISTORY_LIMIT,
    LOW_STOCK_THRESHOLD,
    PAYMENT_CASH,
    PAYMENT_CREDIT,
    TIMESTAMP_FORMAT,
    WINDOW_LAST_7_DAYS,
    WINDOW_THIS_MONTH,
    WINDOW_TODAY,
)
from ...utils.helpers import Clock, day_str, from_minor
from ...utils.validators import is_int
from ..errors import ValidationError


@dataclass
class SalesSummary:
    """
    Totals for one window.

    cash_amount + credit_amount == total_sales. collected_amount is a separate
    axis (debt collected in the window) and is never netted against sales.
    """
    window: str
    total_sales: Decimal
    cash_amount: Decimal
    credit_amount: Decimal
    collected_amount: Decimal


@dataclass
class HistoryEntry:
    kind: str                      # 'SALE' | 'COLLECTION'
    ref_id: int                    # sale_id or payment_id
    amount: Decimal
    date: str
    counterparty_name: str | None  # None for walk-in cash sales
    payment_method: str


@dataclass
class DashboardSnapshot:
    today_sales: Decimal
    outstanding_debt: Decimal
    low_stock_count: int


class ReportingRepo:
    """
    Read-only window queries over sales and debt_payments.

    Notes on date handling:
      • Window bounds are computed here from the injected clock, in local time,
        and passed as parameters; no SQLite clock (DATE('now')) inside filters.
      • Stored timestamps are 'YYYY-MM-DD HH:MM:SS', so text comparison is
        chronological and the date indexes stay usable.
    """

    WINDOWS: tuple[str, ...] = (WINDOW_TODAY, WINDOW_LAST_7_DAYS, WINDOW_THIS_MONTH)

    def __init__(self, conn: sqlite3.Connection, clock: Clock | None = None) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self._clock = clock or datetime.now

    # ----------------------------------------------------------------------
    # ------------------------------ WINDOWS -------------------------------
    # ----------------------------------------------------------------------

    def window_filter(self, window: str, column: str) -> tuple[str, list[str]]:
        """
        SQL predicate + params selecting `column` inside `window`:
          today        -> same local calendar day as now
          last_7_days  -> column >= now - 7 days
          this_month   -> column >= first day of the current month
        """
        now = self._clock()
        if window == WINDOW_TODAY:
            start = now.replace(hour=0, minute=0, second=0, microsecond=0)
            end = start + timedelta(days=1)
            return f"{column} >= ? AND {column} < ?", [day_str(start), day_str(end)]
        if window == WINDOW_LAST_7_DAYS:
            return f"{column} >= ?", [(now - timedelta(days=7)).strftime(TIMESTAMP_FORMAT)]
        if window == WINDOW_THIS_MONTH:
            return f"{column} >= ?", [day_str(now.replace(day=1))]
        raise ValidationError(
            f"Unknown report window {window!r}. Allowed: {', '.join(self.WINDOWS)}"
        )

    # ----------------------------------------------------------------------
    # ------------------------------ SUMMARY -------------------------------
    # ----------------------------------------------------------------------

    def summarize(self, window: str) -> SalesSummary:
        sales_where, sales_params = self.window_filter(window, "s.date")
        pay_where, pay_params = self.window_filter(window, "p.payment_date")

        sales = self.conn.execute(
            f"""
            SELECT
              COALESCE(SUM(s.total_amount), 0) AS total_sales,
              COALESCE(SUM(CASE WHEN s.payment_method = ? THEN s.total_amount END), 0) AS cash_amount,
              COALESCE(SUM(CASE WHEN s.payment_method = ? THEN s.total_amount END), 0) AS credit_amount
            FROM sales s
            WHERE {sales_where}
            """,
            [PAYMENT_CASH, PAYMENT_CREDIT, *sales_params],
        ).fetchone()
        collected = self.conn.execute(
            f"""
            SELECT COALESCE(SUM(p.amount_paid), 0) AS collected
            FROM debt_payments p
            WHERE {pay_where}
            """,
            pay_params,
        ).fetchone()

        return SalesSummary(
            window=window,
            total_sales=from_minor(sales["total_sales"]),
            cash_amount=from_minor(sales["cash_amount"]),
            credit_amount=from_minor(sales["credit_amount"]),
            collected_amount=from_minor(collected["collected"]),
        )

    # ----------------------------------------------------------------------
    # ------------------------------ HISTORY -------------------------------
    # ----------------------------------------------------------------------

    def history(self, window: str, limit: int = HISTORY_LIMIT) -> list[HistoryEntry]:
        """
        Sales and collections in the window, merged newest first and capped at
        `limit` rows (ties on date: higher id first, sales before collections).
        """
        if not is_int(limit) or limit < 0:
            raise ValidationError(f"History limit must be a whole number of zero or more, got {limit!r}.")
        sales_where, sales_params = self.window_filter(window, "s.date")
        pay_where, pay_params = self.window_filter(window, "p.payment_date")
        sql = f"""
        SELECT 'SALE' AS kind, s.sale_id AS ref_id, s.total_amount AS amount,
               s.date AS date, c.name AS counterparty_name, s.payment_method AS payment_method,
               0 AS kind_order
        FROM sales s
        LEFT JOIN customers c ON c.customer_id = s.customer_id
        WHERE {sales_where}
        UNION ALL
        SELECT 'COLLECTION' AS kind, p.payment_id AS ref_id, p.amount_paid AS amount,
               p.payment_date AS date, c.name AS counterparty_name, ? AS payment_method,
               1 AS kind_order
        FROM debt_payments p
        JOIN customers c ON c.customer_id = p.customer_id
        WHERE {pay_where}
        ORDER BY date DESC, kind_order, ref_id DESC
        LIMIT ?
        """
        rows = self.conn.execute(
            sql, [*sales_params, PAYMENT_CASH, *pay_params, limit]
        ).fetchall()
        return [
            HistoryEntry(
                kind=r["kind"],
                ref_id=r["ref_id"],
                amount=from_minor(r["amount"]),
                date=r["date"],
                counterparty_name=r["counterparty_name"],
                payment_method=r["payment_method"],
            )
            for r in rows
        ]

    # ----------------------------------------------------------------------
    # ----------------------------- DASHBOARD ------------------------------
    # ----------------------------------------------------------------------

    def dashboard(self, low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> DashboardSnapshot:
        """Home-screen numbers: today's sales, money owed by customers, low-stock count."""
        today = self.summarize(WINDOW_TODAY)
        debt = self.conn.execute(
            "SELECT COALESCE(SUM(total_debt), 0) AS v FROM customers"
        ).fetchone()
        low = self.conn.execute(
            "SELECT COUNT(*) AS n FROM products WHERE stock < ?",
            (low_stock_threshold,),
        ).fetchone()
        return DashboardSnapshot(
            today_sales=today.total_sales,
            outstanding_debt=from_minor(debt["v"]),
            low_stock_count=int(low["n"]),
        )
