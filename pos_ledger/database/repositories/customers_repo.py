from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3

from ...constants import PAYMENT_CREDIT
from ...utils.helpers import from_minor
from ..errors import ConstraintViolation, ValidationError
from ..transactions import immediate_tx

_log = logging.getLogger(__name__)


@dataclass
class Customer:
    customer_id: int | None
    name: str
    phone: str | None
    total_debt: Decimal

    @classmethod
    def from_row(cls, r: sqlite3.Row) -> "Customer":
        return cls(
            customer_id=r["customer_id"],
            name=r["name"],
            phone=r["phone"],
            total_debt=from_minor(r["total_debt"]),
        )


@dataclass
class DebtMismatch:
    customer_id: int
    name: str
    stored: Decimal
    computed: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored - self.computed


_COLUMNS = "customer_id, name, phone, total_debt"


class CustomersRepo:
    """
    Customer management + the read side of the customer debt ledger.

    total_debt is never written here: it moves only inside the sale and
    payment transactions (SalesRepo.commit_sale / DebtPaymentsRepo.record_payment).
    computed_debt()/audit_debts() rebuild it from history for consistency checks.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        s = s.strip()
        return s or None

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise ValidationError(f"{field_label} cannot be empty.")

    # ---- Queries ----------------------------------------------------------

    def list_customers(self) -> list[Customer]:
        """Customers with the largest outstanding balance first."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers "
            "ORDER BY total_debt DESC, name COLLATE NOCASE, customer_id"
        ).fetchall()
        return [Customer.from_row(r) for r in rows]

    def search(self, term: str) -> list[Customer]:
        """
        Server-side search over id/name/phone using LIKE.
        """
        pattern = f"%{term.strip()}%"
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers "
            "WHERE CAST(customer_id AS TEXT) LIKE ? OR name LIKE ? OR phone LIKE ? "
            "ORDER BY total_debt DESC, name COLLATE NOCASE",
            (pattern, pattern, pattern),
        ).fetchall()
        return [Customer.from_row(r) for r in rows]

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers WHERE customer_id=?",
            (customer_id,),
        ).fetchone()
        return Customer.from_row(r) if r else None

    def exists(self, customer_id: int | None) -> bool:
        if customer_id is None:
            return False
        return self.conn.execute(
            "SELECT 1 FROM customers WHERE customer_id=?", (customer_id,)
        ).fetchone() is not None

    def total_outstanding(self) -> Decimal:
        """Sum of every customer's running balance (credits included)."""
        row = self.conn.execute(
            "SELECT COALESCE(SUM(total_debt), 0) FROM customers"
        ).fetchone()
        return from_minor(row[0])

    # ---- Mutations --------------------------------------------------------

    def create(self, name: str, phone: str | None = None) -> int:
        """
        Insert a new customer with a zero balance.
        """
        self._ensure_non_empty(name, "Name")
        name_n = self._normalize_text(name)
        phone_n = self._normalize_text(phone)

        with immediate_tx(self.conn):
            cur = self.conn.execute(
                "INSERT INTO customers(name, phone, total_debt) VALUES (?, ?, 0)",
                (name_n, phone_n),
            )
            customer_id = int(cur.lastrowid)
        _log.info("Customer %s created (%s)", customer_id, name_n)
        return customer_id

    def update(self, customer_id: int, name: str, phone: str | None) -> None:
        """
        Update contact fields. The balance is not editable.
        """
        self._ensure_non_empty(name, "Name")
        name_n = self._normalize_text(name)
        phone_n = self._normalize_text(phone)

        with immediate_tx(self.conn):
            cur = self.conn.execute(
                "UPDATE customers SET name=?, phone=? WHERE customer_id=?",
                (name_n, phone_n, customer_id),
            )
            if cur.rowcount == 0:
                raise ValidationError(f"Customer {customer_id} does not exist.")
        _log.info("Customer %s updated", customer_id)

    def _customer_is_referenced(self, customer_id: int) -> bool:
        checks = (
            "SELECT 1 FROM sales         WHERE customer_id=? LIMIT 1",
            "SELECT 1 FROM debt_payments WHERE customer_id=? LIMIT 1",
        )
        for sql in checks:
            if self.conn.execute(sql, (customer_id,)).fetchone():
                return True
        return False

    def delete(self, customer_id: int) -> None:
        """
        Delete a customer with no ledger history. Anyone with credit sales or
        payments stays, otherwise their balance would no longer reconcile.
        """
        if not self.exists(customer_id):
            raise ValidationError(f"Customer {customer_id} does not exist.")
        if self._customer_is_referenced(customer_id):
            raise ConstraintViolation(
                f"Cannot delete customer {customer_id}: they have recorded sales or payments."
            )
        with immediate_tx(self.conn):
            self.conn.execute("DELETE FROM customers WHERE customer_id=?", (customer_id,))
        _log.info("Customer %s deleted", customer_id)

    # ---- Reconciliation ---------------------------------------------------

    def computed_debt(self, customer_id: int) -> Decimal:
        """
        Rebuild a balance from history:
            sum(credit sale totals) - sum(debt payments)
        """
        row = self.conn.execute(
            """
            SELECT
              COALESCE((SELECT SUM(s.total_amount) FROM sales s
                         WHERE s.customer_id = ? AND s.payment_method = ?), 0)
              -
              COALESCE((SELECT SUM(p.amount_paid) FROM debt_payments p
                         WHERE p.customer_id = ?), 0) AS balance
            """,
            (customer_id, PAYMENT_CREDIT, customer_id),
        ).fetchone()
        return from_minor(row["balance"])

    def audit_debts(self) -> list[DebtMismatch]:
        """
        Compare every stored total_debt against its history. Returns the
        customers whose running balance has drifted (empty list == consistent).
        """
        rows = self.conn.execute(
            """
            SELECT c.customer_id, c.name, c.total_debt AS stored,
                   COALESCE(cs.credit_total, 0) - COALESCE(dp.paid_total, 0) AS computed
            FROM customers c
            LEFT JOIN (
                SELECT customer_id, SUM(total_amount) AS credit_total
                FROM sales WHERE payment_method = ?
                GROUP BY customer_id
            ) cs ON cs.customer_id = c.customer_id
            LEFT JOIN (
                SELECT customer_id, SUM(amount_paid) AS paid_total
                FROM debt_payments
                GROUP BY customer_id
            ) dp ON dp.customer_id = c.customer_id
            ORDER BY c.customer_id
            """,
            (PAYMENT_CREDIT,),
        ).fetchall()
        mismatches = [
            DebtMismatch(
                customer_id=r["customer_id"],
                name=r["name"],
                stored=from_minor(r["stored"]),
                computed=from_minor(r["computed"]),
            )
            for r in rows
            if int(r["stored"]) != int(r["computed"])
        ]
        for m in mismatches:
            _log.warning(
                "Debt mismatch for customer %s: stored %s, history %s",
                m.customer_id, m.stored, m.computed,
            )
        return mismatches


__all__ = ["Customer", "CustomersRepo", "DebtMismatch"]
