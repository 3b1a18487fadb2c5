# pos_ledger/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from pos_ledger.database.repositories import (
        # Inventory
        ProductsRepo, Product,
        # Customers / debt ledger
        CustomersRepo, Customer, DebtMismatch,
        # Sale engine
        SalesRepo, SaleLine, Sale, SaleItem, Receipt,
        # Payment engine
        DebtPaymentsRepo, DebtPayment,
        # Reporting
        ReportingRepo, SalesSummary, HistoryEntry, DashboardSnapshot,
    )
"""

# ---------------- Products -----------------
from .products_repo import ProductsRepo, Product

# ---------------- Customers ----------------
from .customers_repo import CustomersRepo, Customer, DebtMismatch

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, SaleLine, Sale, SaleItem, Receipt

# -------------- Debt payments --------------
from .debt_payments_repo import DebtPaymentsRepo, DebtPayment

# ---------------- Reporting ----------------
from .reporting_repo import ReportingRepo, SalesSummary, HistoryEntry, DashboardSnapshot

__all__ = [
    # products_repo
    "ProductsRepo",
    "Product",
    # customers_repo
    "CustomersRepo",
    "Customer",
    "DebtMismatch",
    # sales_repo
    "SalesRepo",
    "SaleLine",
    "Sale",
    "SaleItem",
    "Receipt",
    # debt_payments_repo
    "DebtPaymentsRepo",
    "DebtPayment",
    # reporting_repo
    "ReportingRepo",
    "SalesSummary",
    "HistoryEntry",
    "DashboardSnapshot",
]
