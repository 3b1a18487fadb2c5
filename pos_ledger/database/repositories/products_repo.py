# pos_ledger/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3

from ...constants import DEFAULT_UNIT, LOW_STOCK_THRESHOLD
from ...utils.helpers import from_minor, to_minor
from ...utils.validators import is_int, non_empty
from ..errors import ConstraintViolation, ValidationError
from ..transactions import immediate_tx

_log = logging.getLogger(__name__)


@dataclass
class Product:
    product_id: int | None
    name: str
    price: Decimal
    barcode: str | None
    stock: int
    unit: str

    @classmethod
    def from_row(cls, r: sqlite3.Row) -> "Product":
        return cls(
            product_id=r["product_id"],
            name=r["name"],
            price=from_minor(r["price"]),
            barcode=r["barcode"],
            stock=int(r["stock"]),
            unit=r["unit"],
        )


_COLUMNS = "product_id, name, price, barcode, stock, unit"


class ProductsRepo:
    """
    Inventory ledger.

    Stock is only ever changed by:
      - SalesRepo.commit_sale (decrement, inside the sale transaction), and
      - set_stock/reset_stock here (unconditional direct write).
    update() edits catalogue fields and never touches stock.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    # ---------------------------- Internal helpers ----------------------------

    @staticmethod
    def _normalize_barcode(barcode: str | None) -> str | None:
        # a blank scan/field means "no barcode", so it must not collide on UNIQUE
        if barcode is None:
            return None
        barcode = str(barcode).strip()
        return barcode or None

    @staticmethod
    def _validate(name: str, price, unit: str | None) -> tuple[str, int, str]:
        if not non_empty(name):
            raise ValidationError("Name cannot be empty.")
        try:
            price_minor = to_minor(price)
        except ValueError as e:
            raise ValidationError(f"Invalid price: {e}") from e
        if price_minor < 0:
            raise ValidationError("Price cannot be negative.")
        unit_n = unit.strip() if non_empty(unit) else DEFAULT_UNIT
        return name.strip(), price_minor, unit_n

    def _require(self, product_id: int) -> None:
        if self.get(product_id) is None:
            raise ValidationError(f"Product {product_id} does not exist.")

    # ---------------------------- Queries ----------------------------

    def list_products(self) -> list[Product]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products ORDER BY product_id DESC"
        ).fetchall()
        return [Product.from_row(r) for r in rows]

    def search(self, term: str) -> list[Product]:
        """LIKE match on name or barcode."""
        pattern = f"%{term.strip()}%"
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products "
            "WHERE name LIKE ? OR barcode LIKE ? "
            "ORDER BY product_id DESC",
            (pattern, pattern),
        ).fetchall()
        return [Product.from_row(r) for r in rows]

    def get(self, product_id: int) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return Product.from_row(r) if r else None

    def find_by_barcode(self, barcode: str) -> Product | None:
        """Scanner entry point: exact match on the scanned string."""
        code = self._normalize_barcode(barcode)
        if code is None:
            return None
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE barcode=?",
            (code,),
        ).fetchone()
        return Product.from_row(r) if r else None

    def list_low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> list[Product]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE stock < ? ORDER BY stock, product_id",
            (threshold,),
        ).fetchall()
        return [Product.from_row(r) for r in rows]

    # ---------------------------- Mutations ----------------------------

    def create(
        self,
        name: str,
        price,
        barcode: str | None = None,
        stock: int = 0,
        unit: str | None = DEFAULT_UNIT,
    ) -> int:
        name_n, price_minor, unit_n = self._validate(name, price, unit)
        if not is_int(stock):
            raise ValidationError("Stock must be a whole number.")
        with immediate_tx(self.conn):
            cur = self.conn.execute(
                "INSERT INTO products(name, price, barcode, stock, unit) VALUES (?, ?, ?, ?, ?)",
                (name_n, price_minor, self._normalize_barcode(barcode), stock, unit_n),
            )
            product_id = int(cur.lastrowid)
        _log.info("Product %s created (%s)", product_id, name_n)
        return product_id

    def update(
        self,
        product_id: int,
        name: str,
        price,
        barcode: str | None,
        unit: str | None = DEFAULT_UNIT,
    ) -> None:
        name_n, price_minor, unit_n = self._validate(name, price, unit)
        with immediate_tx(self.conn):
            cur = self.conn.execute(
                "UPDATE products SET name=?, price=?, barcode=?, unit=? WHERE product_id=?",
                (name_n, price_minor, self._normalize_barcode(barcode), unit_n, product_id),
            )
            if cur.rowcount == 0:
                raise ValidationError(f"Product {product_id} does not exist.")
        _log.info("Product %s updated", product_id)

    def set_stock(self, product_id: int, stock: int) -> None:
        """Direct stock write (count correction / reset). Not atomic with anything else."""
        if not is_int(stock):
            raise ValidationError("Stock must be a whole number.")
        with immediate_tx(self.conn):
            cur = self.conn.execute(
                "UPDATE products SET stock=? WHERE product_id=?",
                (stock, product_id),
            )
            if cur.rowcount == 0:
                raise ValidationError(f"Product {product_id} does not exist.")
        _log.info("Product %s stock set to %s", product_id, stock)

    def reset_stock(self, product_id: int) -> None:
        self.set_stock(product_id, 0)

    def _product_is_referenced(self, product_id: int) -> bool:
        return self.conn.execute(
            "SELECT 1 FROM sale_items WHERE product_id=? LIMIT 1",
            (product_id,),
        ).fetchone() is not None

    def delete(self, product_id: int) -> None:
        """
        Delete a product that was never sold.

        Products referenced by historical sale items are kept so receipts and
        reports can still resolve them; reset_stock() is the way to retire one.
        """
        self._require(product_id)
        if self._product_is_referenced(product_id):
            raise ConstraintViolation(
                f"Cannot delete product {product_id}: it appears on recorded sales."
            )
        with immediate_tx(self.conn):
            self.conn.execute("DELETE FROM products WHERE product_id=?", (product_id,))
        _log.info("Product %s deleted", product_id)
