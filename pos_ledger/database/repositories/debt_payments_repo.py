from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3

from ...utils.helpers import Clock, from_minor, now_str, to_minor
from ...utils.validators import fits_integer
from ..errors import ValidationError
from ..transactions import immediate_tx

_log = logging.getLogger(__name__)


@dataclass
class DebtPayment:
    payment_id: int
    customer_id: int
    amount_paid: Decimal
    payment_date: str


class DebtPaymentsRepo:
    """
    Payment engine: collections against a customer's running balance.

    record_payment() appends the payment row and decrements total_debt in one
    IMMEDIATE transaction. The balance is not clamped at zero; paying more than
    is owed leaves a negative balance, i.e. credit held for the customer.
    """

    def __init__(self, conn: sqlite3.Connection, clock: Clock | None = None):
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self._clock = clock

    # --- soft validation ---------------------------------------------------

    @staticmethod
    def _normalize_amount(amount) -> int:
        if amount is None:
            raise ValidationError("Amount is required.")
        try:
            amount_minor = to_minor(amount)
        except ValueError as e:
            raise ValidationError(f"Invalid amount: {e}") from e
        if amount_minor <= 0:
            raise ValidationError("Payment amount must be greater than zero.")
        return amount_minor

    # --- internal writes (inside the payment transaction) -----------------

    def _reduce_debt(self, customer_id: int, amount_minor: int) -> None:
        row = self.conn.execute(
            "SELECT total_debt FROM customers WHERE customer_id=?", (customer_id,)
        ).fetchone()
        if not fits_integer(int(row["total_debt"]) - amount_minor):
            raise ValidationError(f"Customer {customer_id}: balance would leave the storable range.")
        self.conn.execute(
            "UPDATE customers SET total_debt = total_debt - ? WHERE customer_id=?",
            (amount_minor, customer_id),
        )

    # --- API ---------------------------------------------------------------

    def record_payment(self, customer_id: int, amount) -> int:
        """
        Inserts a row into debt_payments, reduces the customer's balance and
        returns payment_id.
        """
        amount_minor = self._normalize_amount(amount)

        with immediate_tx(self.conn):
            if not self.conn.execute(
                "SELECT 1 FROM customers WHERE customer_id=?", (customer_id,)
            ).fetchone():
                raise ValidationError(f"Customer {customer_id} does not exist.")

            cur = self.conn.execute(
                "INSERT INTO debt_payments (customer_id, amount_paid, payment_date) VALUES (?, ?, ?)",
                (customer_id, amount_minor, now_str(self._clock)),
            )
            payment_id = int(cur.lastrowid)
            self._reduce_debt(customer_id, amount_minor)

        _log.info(
            "Payment %s recorded: %s from customer %s",
            payment_id, from_minor(amount_minor), customer_id,
        )
        return payment_id

    def get(self, payment_id: int) -> DebtPayment | None:
        r = self.conn.execute(
            "SELECT payment_id, customer_id, amount_paid, payment_date "
            "FROM debt_payments WHERE payment_id=?",
            (payment_id,),
        ).fetchone()
        return self._from_row(r) if r else None

    def list_by_customer(self, customer_id: int) -> list[DebtPayment]:
        rows = self.conn.execute(
            "SELECT payment_id, customer_id, amount_paid, payment_date "
            "FROM debt_payments WHERE customer_id=? "
            "ORDER BY payment_date DESC, payment_id DESC",
            (customer_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    @staticmethod
    def _from_row(r: sqlite3.Row) -> DebtPayment:
        return DebtPayment(
            payment_id=r["payment_id"],
            customer_id=r["customer_id"],
            amount_paid=from_minor(r["amount_paid"]),
            payment_date=r["payment_date"],
        )
