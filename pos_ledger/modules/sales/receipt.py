# pos_ledger/modules/sales/receipt.py
"""
Receipt rendering for printing/sharing.

Consumes the read-only Receipt bundle from SalesRepo.get_receipt(); nothing
here writes to the ledger.
"""
from __future__ import annotations

import logging
from pathlib import Path

from ...constants import APP_NAME
from ...database.repositories.sales_repo import Receipt
from ...resources import load_template
from ...utils.helpers import fmt_money

_log = logging.getLogger(__name__)


def render_receipt_html(receipt: Receipt, shop_name: str = APP_NAME) -> str:
    template = load_template("receipt.html")
    return template.render(
        shop_name=shop_name,
        sale=receipt.sale,
        items=receipt.items,
        money=fmt_money,
    )


def write_receipt_pdf(receipt: Receipt, path: str | Path, shop_name: str = APP_NAME) -> Path:
    """Render the receipt to a PDF file and return its path."""
    # weasyprint needs system Pango/Cairo; import only when a PDF is requested
    from weasyprint import HTML

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    html = render_receipt_html(receipt, shop_name=shop_name)
    try:
        HTML(string=html).write_pdf(str(target))
    except Exception as e:
        _log.error("Failed to render receipt %s to %s: %s", receipt.sale.sale_id, target, e, exc_info=True)
        raise
    _log.info("Receipt %s written to %s", receipt.sale.sale_id, target)
    return target
