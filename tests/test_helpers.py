from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from pos_ledger.utils.helpers import day_str, fmt_money, from_minor, now_str, to_decimal, to_minor
from pos_ledger.utils.validators import fits_integer, is_int, is_positive_int, non_empty


@pytest.mark.parametrize(
    "value, minor",
    [(0, 0), (10, 1000), ("12.5", 1250), (Decimal("0.01"), 1), (0.1, 10), ("-3.20", -320), (" 7 ", 700)],
)
def test_to_minor(value, minor) -> None:
    assert to_minor(value) == minor


@pytest.mark.parametrize("value", ["1.005", 0.001, "abc", "", None, True, "inf", "NaN"])
def test_to_minor_rejects(value) -> None:
    with pytest.raises(ValueError):
        to_minor(value)


def test_from_minor() -> None:
    assert from_minor(1250) == Decimal("12.50")
    assert str(from_minor(5)) == "0.05"
    assert from_minor(None) == 0
    assert from_minor(to_minor("0.10")) * 3 == Decimal("0.30")


def test_to_decimal_avoids_binary_floats() -> None:
    assert to_decimal(10.1) == Decimal("10.1")


def test_fmt_money() -> None:
    assert fmt_money(Decimal("1234567.5")) == "1,234,567.50"
    assert fmt_money(0) == "0.00"
    assert fmt_money("x") == "x"
    assert fmt_money("x", sentinel="N/A") == "N/A"
    with pytest.raises(ValueError):
        fmt_money("x", strict=True)


def test_timestamps() -> None:
    moment = datetime(2026, 3, 4, 5, 6, 7)
    assert now_str(lambda: moment) == "2026-03-04 05:06:07"
    assert day_str(moment) == "2026-03-04"
    assert len(now_str()) == 19


def test_validators() -> None:
    assert non_empty(" a ") and not non_empty("  ") and not non_empty(None)
    assert is_positive_int(3)
    assert not any(is_positive_int(x) for x in (0, -1, 2.0, "2", True, None))
    assert is_int(-4) and not is_int(False) and not is_int(1.0)


def test_to_minor_range() -> None:
    """Minor units must fit a signed 64-bit SQLite INTEGER."""
    assert to_minor("92233720368547758.07") == 2**63 - 1
    assert to_minor("-92233720368547758.07") == -(2**63) + 1
    for v in ("92233720368547758.08", Decimal("1e18"), "-1e30"):
        with pytest.raises(ValueError):
            to_minor(v)


def test_fits_integer() -> None:
    assert fits_integer(2**63 - 1) and fits_integer(-(2**63))
    assert not fits_integer(2**63) and not fits_integer(-(2**63) - 1)
    assert not is_int(2**63) and not is_positive_int(2**63)
