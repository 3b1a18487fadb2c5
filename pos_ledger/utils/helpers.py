# pos_ledger/utils/helpers.py
from datetime import datetime
from decimal import Decimal, InvalidOperation
import logging
from typing import Callable, Optional, Union

from ..constants import DATE_FORMAT, MAX_INTEGER, MONEY_PLACES, TIMESTAMP_FORMAT

NumberLike = Union[Decimal, float, int, str]
Clock = Callable[[], datetime]

_log = logging.getLogger(__name__)


def now_str(clock: Optional[Clock] = None) -> str:
    """Return the current local timestamp as stored in the ledger tables."""
    return (clock or datetime.now)().strftime(TIMESTAMP_FORMAT)


def day_str(moment: datetime) -> str:
    return moment.strftime(DATE_FORMAT)


def to_decimal(v: NumberLike) -> Decimal:
    """
    Parse a number into a Decimal without going through binary floats.

    Floats are converted via str() so 10.1 becomes Decimal("10.1") rather than
    its binary expansion. Raises ValueError on anything non-numeric or non-finite.
    """
    if isinstance(v, bool):
        raise ValueError(f"Could not parse {v!r} as a number.")
    if isinstance(v, Decimal):
        d = v
    else:
        try:
            d = Decimal(str(v).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
    if not d.is_finite():
        raise ValueError(f"{v!r} is not a finite number.")
    return d


def to_minor(v: NumberLike) -> int:
    """
    Convert a money value to integer minor units (12.5 -> 1250).

    Values carrying more precision than MONEY_PLACES are rejected, never rounded,
    and so are values outside the signed 64-bit range SQLite can store.
    """
    d = to_decimal(v)
    scaled = d.scaleb(MONEY_PLACES)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{v!r} has more than {MONEY_PLACES} decimal places.")
    n = int(scaled)
    if abs(n) > MAX_INTEGER:
        raise ValueError(f"{v!r} is too large.")
    return n


def from_minor(n: Optional[int]) -> Decimal:
    """Inverse of to_minor: 1250 -> Decimal('12.50'). NULL reads as zero."""
    return Decimal(int(n or 0)).scaleb(-MONEY_PLACES)


def fmt_money(
    v: NumberLike,
    places: int = MONEY_PLACES,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = to_decimal(v)
    except ValueError as e:
        _log.debug("fmt_money: failed to parse %r: %s", v, e)
        if strict:
            raise
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"
