# pos_ledger/cli.py
"""
Command-line access to the ledger (back-office use; the till UI is separate).

    pos-ledger init
    pos-ledger summary --window today
    pos-ledger history --window last_7_days --limit 20
    pos-ledger dashboard
    pos-ledger audit
    pos-ledger receipt 42 --out receipt.pdf
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import DB_PATH, LOG_LEVEL
from .constants import HISTORY_LIMIT, WINDOW_TODAY
from .database import get_connection
from .database.errors import DomainError
from .database.repositories import CustomersRepo, ReportingRepo, SalesRepo
from .modules.reporting import build_report_text
from .modules.sales import render_receipt_html, write_receipt_pdf
from .utils.helpers import fmt_money
from .utils.loggers import get_logger


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pos-ledger", description="Point-of-sale ledger tools.")
    p.add_argument("--db", default=None, help=f"SQLite file (default: {DB_PATH})")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the database and schema if missing.")

    s = sub.add_parser("summary", help="Sales/collection totals for a window.")
    s.add_argument("--window", default=WINDOW_TODAY, choices=ReportingRepo.WINDOWS)

    h = sub.add_parser("history", help="Recent sales and collections, newest first.")
    h.add_argument("--window", default=WINDOW_TODAY, choices=ReportingRepo.WINDOWS)
    h.add_argument("--limit", type=int, default=HISTORY_LIMIT)

    sub.add_parser("dashboard", help="Today's sales, outstanding debt, low-stock count.")
    sub.add_parser("audit", help="Check every customer balance against its history.")

    r = sub.add_parser("receipt", help="Render a sale receipt (HTML to stdout, or --out file).")
    r.add_argument("sale_id", type=int)
    r.add_argument("--out", default=None, help="Write to this path; .pdf renders a PDF.")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    log = get_logger("pos_ledger", LOG_LEVEL)

    conn = get_connection(args.db)
    try:
        if args.command == "init":
            print(f"Ledger ready at {args.db or DB_PATH}")

        elif args.command == "summary":
            print(build_report_text(ReportingRepo(conn).summarize(args.window)))

        elif args.command == "history":
            for e in ReportingRepo(conn).history(args.window, limit=args.limit):
                who = e.counterparty_name or "-"
                print(f"{e.date}  {e.kind:<10} #{e.ref_id:<6} {e.payment_method:<6} {fmt_money(e.amount):>12}  {who}")

        elif args.command == "dashboard":
            snap = ReportingRepo(conn).dashboard()
            print(f"Today's sales:    {fmt_money(snap.today_sales)}")
            print(f"Outstanding debt: {fmt_money(snap.outstanding_debt)}")
            print(f"Low-stock items:  {snap.low_stock_count}")

        elif args.command == "audit":
            mismatches = CustomersRepo(conn).audit_debts()
            if not mismatches:
                print("All customer balances reconcile.")
                return 0
            for m in mismatches:
                print(f"#{m.customer_id} {m.name}: stored {fmt_money(m.stored)}, history {fmt_money(m.computed)}")
            return 1

        elif args.command == "receipt":
            receipt = SalesRepo(conn).get_receipt(args.sale_id)
            if args.out and Path(args.out).suffix.lower() == ".pdf":
                write_receipt_pdf(receipt, args.out)
            elif args.out:
                Path(args.out).write_text(render_receipt_html(receipt), encoding="utf-8")
            else:
                print(render_receipt_html(receipt))

    except DomainError as e:
        log.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
