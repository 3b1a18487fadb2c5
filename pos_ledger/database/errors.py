# pos_ledger/database/errors.py
"""
Ledger error taxonomy.

Every public mutating operation either applies fully or raises exactly one of
these. None of them are retried inside the ledger; callers keep their cart/form
state and decide whether to resubmit.
"""


class DomainError(Exception):
    """Domain-level error the caller can surface directly (toast/snackbar)."""
    pass


class ValidationError(DomainError):
    """Malformed input: rejected before any write."""
    pass


class ConstraintViolation(DomainError):
    """A storage constraint refused the write (duplicate barcode, missing FK target...)."""
    pass


class StorageFailure(DomainError):
    """Underlying I/O, locking or transaction failure; the whole operation was rolled back."""
    pass


__all__ = [
    "DomainError",
    "ValidationError",
    "ConstraintViolation",
    "StorageFailure",
]
