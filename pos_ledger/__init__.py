"""Point-of-sale ledger: inventory, customer debt, sales, collections and reports over one SQLite file."""

__version__ = "1.0.0"
