from ..constants import MAX_INTEGER


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


def fits_integer(x: int) -> bool:
    """True iff x can be stored in a SQLite INTEGER column."""
    return -MAX_INTEGER - 1 <= x <= MAX_INTEGER


def is_positive_int(x) -> bool:
    """
    True iff x is a real int (bool excluded), x > 0 and storable.
    Quantities are whole units; 2.0 or "2" are not accepted.
    """
    return is_int(x) and x > 0


def is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and fits_integer(x)
