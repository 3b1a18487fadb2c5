"""
Inventory ledger tests: catalogue CRUD, barcode lookup/uniqueness, direct
stock writes and the delete policy for products that appear on sales.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from pos_ledger.database.errors import ConstraintViolation, ValidationError
from pos_ledger.database.repositories import Product, SaleLine


def test_c1_create_and_get(products) -> None:
    """C1: created products round-trip with Decimal price and defaults."""
    pid = products.create("Rice", "12.50", barcode=" 6221 ", stock=7)
    p = products.get(pid)
    assert p == Product(pid, "Rice", Decimal("12.50"), "6221", 7, "unit")


def test_c2_list_newest_first(products) -> None:
    a = products.create("A", 1)
    b = products.create("B", 2)
    assert [p.product_id for p in products.list_products()] == [b, a]


def test_c3_find_by_barcode(products, ids) -> None:
    """C3: scanner lookup matches exactly; unknown or blank codes give None."""
    hit = products.find_by_barcode("1002")
    assert hit is not None and hit.name == "Sugar" and hit.unit == "kg"
    assert products.find_by_barcode("9999") is None
    assert products.find_by_barcode("   ") is None


def test_c4_duplicate_barcode_is_constraint_violation(products, ids) -> None:
    """C4: duplicate barcode on create and on update surfaces as ConstraintViolation."""
    with pytest.raises(ConstraintViolation):
        products.create("Fake Tea", 1, barcode="1001")
    with pytest.raises(ConstraintViolation):
        products.update(ids["sugar"], "Sugar", 15, "1001", "kg")
    assert products.get(ids["sugar"]).barcode == "1002"


def test_c5_blank_barcodes_do_not_collide(products) -> None:
    """C5: empty barcode fields are stored as NULL."""
    a = products.create("Loose A", 1, barcode="")
    b = products.create("Loose B", 1, barcode="  ")
    assert products.get(a).barcode is None
    assert products.get(b).barcode is None


@pytest.mark.parametrize("name, price", [("", 1), ("  ", 1), ("X", -1), ("X", "abc"), ("X", "1.005")])
def test_c6_invalid_input_rejected(products, name, price) -> None:
    with pytest.raises(ValidationError):
        products.create(name, price)
    assert products.list_products() == []


def test_c7_update_does_not_touch_stock(products, ids) -> None:
    """C7: editing catalogue fields leaves stock alone."""
    products.update(ids["tea"], "Green Tea", Decimal("11"), "1001", "box")
    p = products.get(ids["tea"])
    assert (p.name, p.price, p.unit, p.stock) == ("Green Tea", Decimal("11"), "box", 5)


def test_c8_update_missing_product(products) -> None:
    with pytest.raises(ValidationError):
        products.update(404, "Ghost", 1, None)


def test_c9_set_and_reset_stock(products, ids) -> None:
    """C9: direct stock writes are unconditional, negative values included."""
    products.set_stock(ids["tea"], 40)
    assert products.get(ids["tea"]).stock == 40
    products.set_stock(ids["tea"], -2)
    assert products.get(ids["tea"]).stock == -2
    products.reset_stock(ids["tea"])
    assert products.get(ids["tea"]).stock == 0
    with pytest.raises(ValidationError):
        products.set_stock(ids["tea"], 1.5)
    with pytest.raises(ValidationError):
        products.set_stock(404, 1)


def test_c10_delete_unsold_product(products, ids) -> None:
    products.delete(ids["soap"])
    assert products.get(ids["soap"]) is None
    with pytest.raises(ValidationError):
        products.delete(ids["soap"])


def test_c11_delete_sold_product_refused(products, sales, ids) -> None:
    """C11: products on historical sale items cannot be deleted."""
    sales.commit_sale([SaleLine(ids["tea"], 1)], "cash")
    with pytest.raises(ConstraintViolation):
        products.delete(ids["tea"])
    assert products.get(ids["tea"]) is not None


def test_c12_low_stock_and_search(products, ids) -> None:
    """C12: below-threshold listing and name/barcode search."""
    low = [p.name for p in products.list_low_stock(5)]
    assert low == ["Soap"]
    assert [p.name for p in products.search("ug")] == ["Sugar"]
    assert [p.name for p in products.search("1001")] == ["Tea"]


def test_c13_values_beyond_integer_range(products, ids) -> None:
    """C13: prices and stock that SQLite cannot store are rejected as input errors."""
    with pytest.raises(ValidationError):
        products.create("Gold", Decimal("1e18"))
    with pytest.raises(ValidationError):
        products.create("Gold", 1, stock=2**63)
    with pytest.raises(ValidationError):
        products.update(ids["tea"], "Tea", Decimal("1e18"), "1001")
    with pytest.raises(ValidationError):
        products.set_stock(ids["tea"], -(2**63) - 1)
    assert [p.name for p in products.list_products()] == ["Soap", "Sugar", "Tea"]
    assert products.get(ids["tea"]).price == Decimal("10")
