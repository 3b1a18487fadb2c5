from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
import logging
import sqlite3
from typing import Iterable, Optional, Sequence

from ...constants import PAYMENT_CASH, PAYMENT_CREDIT
from ...utils.helpers import Clock, from_minor, now_str, to_minor
from ...utils.validators import fits_integer, is_positive_int
from ..errors import ConstraintViolation, ValidationError
from ..transactions import immediate_tx

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleLine:
    """
    One checkout line handed to commit_sale.

    unit_price=None means "charge the product's current price", read inside
    the sale transaction.
    """
    product_id: int
    quantity: int
    unit_price: Optional[Decimal] = None


@dataclass
class Sale:
    sale_id: int
    customer_id: int | None
    total_amount: Decimal
    payment_method: str
    date: str
    customer_name: str | None = None


@dataclass
class SaleItem:
    item_id: int
    sale_id: int
    product_id: int
    quantity: int
    price_at_sale: Decimal
    product_name: str | None = None
    unit: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.price_at_sale * self.quantity


@dataclass
class Receipt:
    """Read-only {sale, items} bundle consumed by receipt printing/sharing."""
    sale: Sale
    items: list[SaleItem] = field(default_factory=list)


class SalesRepo:
    """
    Sale engine + sale history.

    commit_sale() is the only writer of sales/sale_items. In a single
    IMMEDIATE transaction it:
      - inserts the sale header,
      - inserts each item with its price snapshot,
      - decrements each product's stock (unconditionally; may go negative),
      - for credit sales, adds the total to the customer's running balance.
    Any failure rolls all of it back; no partial sale is ever visible.
    """

    METHODS: set[str] = {PAYMENT_CASH, PAYMENT_CREDIT}

    def __init__(self, conn: sqlite3.Connection, clock: Clock | None = None):
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self._clock = clock

    # ---------------------------------------------------------------------
    # VALIDATION
    # ---------------------------------------------------------------------
    def _validate(
        self,
        lines: Sequence[SaleLine],
        method: str,
        customer_id: int | None,
    ) -> list[tuple[int, int, Optional[int]]]:
        """
        Returns normalized (product_id, quantity, unit_price_minor|None) tuples
        or raises ValidationError with a user-facing message.
        """
        if method not in self.METHODS:
            raise ValidationError(f"Unsupported payment method: {method!r}")
        if method == PAYMENT_CREDIT and customer_id is None:
            raise ValidationError("A credit sale requires a customer.")
        if method == PAYMENT_CASH and customer_id is not None:
            raise ValidationError("A cash sale must not reference a customer.")

        lines = list(lines or [])
        if not lines:
            raise ValidationError("Cannot commit an empty sale.")

        normalized: list[tuple[int, int, Optional[int]]] = []
        for n, ln in enumerate(lines, start=1):
            if not is_positive_int(ln.product_id):
                raise ValidationError(f"Line {n}: a product is required.")
            if not is_positive_int(ln.quantity):
                raise ValidationError(f"Line {n}: quantity must be a whole number above zero.")
            price_minor: Optional[int] = None
            if ln.unit_price is not None:
                try:
                    price_minor = to_minor(ln.unit_price)
                except ValueError as e:
                    raise ValidationError(f"Line {n}: invalid unit price: {e}") from e
                if price_minor < 0:
                    raise ValidationError(f"Line {n}: unit price cannot be negative.")
            normalized.append((ln.product_id, ln.quantity, price_minor))
        return normalized

    # ---------------------------------------------------------------------
    # INTERNAL WRITES (called inside the sale transaction only)
    # ---------------------------------------------------------------------
    def _current_price(self, product_id: int) -> int:
        row = self.conn.execute(
            "SELECT price FROM products WHERE product_id=?", (product_id,)
        ).fetchone()
        if row is None:
            raise ConstraintViolation(f"Product {product_id} does not exist.")
        return int(row["price"])

    def _insert_header(self, total: int, method: str, customer_id: int | None, date: str) -> int:
        cur = self.conn.execute(
            "INSERT INTO sales (customer_id, total_amount, payment_method, date) VALUES (?,?,?,?)",
            (customer_id, total, method, date),
        )
        return int(cur.lastrowid)

    def _insert_item(self, sale_id: int, product_id: int, quantity: int, price_minor: int) -> int:
        cur = self.conn.execute(
            "INSERT INTO sale_items (sale_id, product_id, quantity, price_at_sale) VALUES (?,?,?,?)",
            (sale_id, product_id, quantity, price_minor),
        )
        return int(cur.lastrowid)

    def _decrement_stock(self, product_id: int, quantity: int) -> int:
        row = self.conn.execute(
            "SELECT stock FROM products WHERE product_id=?", (product_id,)
        ).fetchone()
        if row is None:
            raise ConstraintViolation(f"Product {product_id} does not exist.")
        stock_after = int(row["stock"]) - quantity
        if not fits_integer(stock_after):
            raise ValidationError(f"Product {product_id}: stock would leave the storable range.")
        self.conn.execute(
            "UPDATE products SET stock=? WHERE product_id=?",
            (stock_after, product_id),
        )
        return stock_after

    def _accrue_debt(self, customer_id: int, amount: int) -> None:
        row = self.conn.execute(
            "SELECT total_debt FROM customers WHERE customer_id=?", (customer_id,)
        ).fetchone()
        if row is None:
            raise ValidationError(f"Customer {customer_id} does not exist.")
        if not fits_integer(int(row["total_debt"]) + amount):
            raise ValidationError(f"Customer {customer_id}: balance would leave the storable range.")
        self.conn.execute(
            "UPDATE customers SET total_debt = total_debt + ? WHERE customer_id=?",
            (amount, customer_id),
        )

    # ---------------------------------------------------------------------
    # WRITE: SALE ENGINE
    # ---------------------------------------------------------------------
    def commit_sale(
        self,
        lines: Iterable[SaleLine],
        method: str,
        customer_id: int | None = None,
    ) -> int:
        """
        Commit a sale atomically and return its sale_id.

        Raises:
          ValidationError     bad input (nothing written)
          ConstraintViolation a referenced product/customer row is missing
          StorageFailure      I/O, lock or transaction failure
        """
        normalized = self._validate(list(lines or []), method, customer_id)
        negative: list[tuple[int, int]] = []

        with immediate_tx(self.conn):
            if method == PAYMENT_CREDIT:
                if not self.conn.execute(
                    "SELECT 1 FROM customers WHERE customer_id=?", (customer_id,)
                ).fetchone():
                    raise ValidationError(f"Customer {customer_id} does not exist.")

            priced = [
                (pid, qty, price if price is not None else self._current_price(pid))
                for pid, qty, price in normalized
            ]
            total = sum(qty * price for _, qty, price in priced)
            if not fits_integer(total):
                raise ValidationError("Sale total is too large.")

            sale_id = self._insert_header(total, method, customer_id, now_str(self._clock))
            for pid, qty, price in priced:
                self._insert_item(sale_id, pid, qty, price)
                stock_after = self._decrement_stock(pid, qty)
                if stock_after < 0:
                    negative.append((pid, stock_after))

            if method == PAYMENT_CREDIT:
                self._accrue_debt(customer_id, total)

        _log.info(
            "Sale %s committed: %s %s across %d line(s)%s",
            sale_id, method, from_minor(total), len(priced),
            f" for customer {customer_id}" if customer_id is not None else "",
        )
        for pid, stock_after in negative:
            _log.warning("Product %s stock is negative after sale %s: %s", pid, sale_id, stock_after)
        return sale_id

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    @staticmethod
    def _sale_from_row(r: sqlite3.Row) -> Sale:
        return Sale(
            sale_id=r["sale_id"],
            customer_id=r["customer_id"],
            total_amount=from_minor(r["total_amount"]),
            payment_method=r["payment_method"],
            date=r["date"],
            customer_name=r["customer_name"],
        )

    def list_sales(self, date_from: str | None = None) -> list[Sale]:
        """
        Newest first. `date_from` ('YYYY-MM-DD' or full timestamp) is inclusive.
        """
        sql = """
        SELECT s.sale_id, s.customer_id, s.total_amount, s.payment_method, s.date,
               c.name AS customer_name
        FROM sales s
        LEFT JOIN customers c ON c.customer_id = s.customer_id
        """
        params: list = []
        if date_from:
            sql += " WHERE s.date >= ?"
            params.append(date_from)
        sql += " ORDER BY s.date DESC, s.sale_id DESC"
        return [self._sale_from_row(r) for r in self.conn.execute(sql, params).fetchall()]

    def get_sale(self, sale_id: int) -> Sale | None:
        r = self.conn.execute(
            """
            SELECT s.sale_id, s.customer_id, s.total_amount, s.payment_method, s.date,
                   c.name AS customer_name
            FROM sales s
            LEFT JOIN customers c ON c.customer_id = s.customer_id
            WHERE s.sale_id = ?
            """,
            (sale_id,),
        ).fetchone()
        return self._sale_from_row(r) if r else None

    def list_items(self, sale_id: int) -> list[SaleItem]:
        rows = self.conn.execute(
            """
            SELECT si.item_id, si.sale_id, si.product_id, si.quantity, si.price_at_sale,
                   p.name AS product_name, p.unit
            FROM sale_items si
            LEFT JOIN products p ON p.product_id = si.product_id
            WHERE si.sale_id = ?
            ORDER BY si.item_id
            """,
            (sale_id,),
        ).fetchall()
        return [
            SaleItem(
                item_id=r["item_id"],
                sale_id=r["sale_id"],
                product_id=r["product_id"],
                quantity=int(r["quantity"]),
                price_at_sale=from_minor(r["price_at_sale"]),
                product_name=r["product_name"],
                unit=r["unit"],
            )
            for r in rows
        ]

    def get_receipt(self, sale_id: int) -> Receipt:
        sale = self.get_sale(sale_id)
        if sale is None:
            raise ValidationError(f"Sale {sale_id} does not exist.")
        return Receipt(sale=sale, items=self.list_items(sale_id))
