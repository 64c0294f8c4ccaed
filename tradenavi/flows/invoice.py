"""销售请求书查询与合计。"""

from __future__ import annotations

from tradenavi.core.dependency import dependency
from tradenavi.core.models import InvoiceType, SalesInvoice
from tradenavi.core.protocols import InvoiceRepository
from tradenavi.core.rules.totals import Totals, calculate_invoice_totals


@dependency
def list_invoices(
    *,
    invoice_type: InvoiceType | None = None,
    invoice_repo: InvoiceRepository | None = None,
) -> list[SalesInvoice]:
    """返回请求书列表（可按 hall / vendor 过滤）。"""
    return invoice_repo.list_all(invoice_type)


@dependency
def get_invoice_totals(
    *,
    invoice_id: str,
    invoice_repo: InvoiceRepository | None = None,
) -> tuple[SalesInvoice, Totals]:
    """
    读取请求书并计算合计。

    Returns:
        (请求书, 合计)；已开票金额优先于重新计算。

    Raises:
        ValueError: 请求书不存在。
    """
    invoice = invoice_repo.get(invoice_id)
    if invoice is None:
        raise ValueError(f"请求书不存在：{invoice_id}")
    return invoice, calculate_invoice_totals(invoice)
