# pos_ledger/modules/reporting/share.py
from __future__ import annotations

from datetime import date

from ...constants import WINDOW_LAST_7_DAYS, WINDOW_THIS_MONTH, WINDOW_TODAY
from ...database.repositories.reporting_repo import SalesSummary
from ...utils.helpers import fmt_money
from ...resources import load_template

WINDOW_LABELS = {
    WINDOW_TODAY: "Today",
    WINDOW_LAST_7_DAYS: "Last 7 days",
    WINDOW_THIS_MONTH: "This month",
}


def build_report_text(summary: SalesSummary, generated_on: date | None = None) -> str:
    """Plain-text window summary for sharing (messaging apps, clipboard)."""
    template = load_template("report.txt")
    return template.render(
        window_label=WINDOW_LABELS.get(summary.window, summary.window),
        summary=summary,
        generated_on=(generated_on or date.today()).isoformat(),
        money=fmt_money,
    )
