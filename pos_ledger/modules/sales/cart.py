# pos_ledger/modules/sales/cart.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from ...database.repositories.sales_repo import SaleLine
from ...utils.validators import is_positive_int

if TYPE_CHECKING:
    from ...database.repositories.products_repo import Product, ProductsRepo


@dataclass
class CartLine:
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """
    Pending checkout lines, owned by the caller (one per checkout screen).

    Nothing here touches the database except scan(), which only reads. The
    price shown is captured when the product is added and is what
    commit_sale() charges via to_sale_lines().
    """

    def __init__(self) -> None:
        self._lines: dict[int, CartLine] = {}

    # ---- read ----

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def total(self) -> Decimal:
        return sum((ln.line_total for ln in self._lines.values()), Decimal("0"))

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    def quantity_of(self, product_id: int) -> int:
        ln = self._lines.get(product_id)
        return ln.quantity if ln else 0

    # ---- edit ----

    def add(self, product: "Product") -> CartLine:
        """Add one unit; a product already in the cart just gets +1."""
        ln = self._lines.get(product.product_id)
        if ln is None:
            ln = CartLine(product.product_id, product.name, product.price, 1)
            self._lines[product.product_id] = ln
        else:
            ln.quantity += 1
        return ln

    def scan(self, products: "ProductsRepo", barcode: str) -> "Product | None":
        """Look a scanned code up and add it. Unknown codes leave the cart as is."""
        product = products.find_by_barcode(barcode)
        if product is not None:
            self.add(product)
        return product

    def increase(self, product_id: int) -> None:
        self._line(product_id).quantity += 1

    def decrease(self, product_id: int) -> None:
        # floor at 1; removing a line is an explicit remove()
        ln = self._line(product_id)
        ln.quantity = max(1, ln.quantity - 1)

    def set_quantity(self, product_id: int, quantity: int) -> None:
        if not is_positive_int(quantity):
            raise ValueError("Quantity must be a whole number above zero.")
        self._line(product_id).quantity = quantity

    def remove(self, product_id: int) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def to_sale_lines(self) -> list[SaleLine]:
        return [SaleLine(ln.product_id, ln.quantity, ln.unit_price) for ln in self._lines.values()]

    def _line(self, product_id: int) -> CartLine:
        try:
            return self._lines[product_id]
        except KeyError:
            raise KeyError(f"Product {product_id} is not in the cart.") from None
