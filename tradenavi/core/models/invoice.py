from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

InvoiceType = Literal["hall", "vendor"]
"""请求书类型：hall=ホール（游戏厅），vendor=業者（贸易公司）。"""


@dataclass(slots=True)
class InvoiceItem:
    """请求书明细行（一台机器或一批同型号机器）。"""

    quantity: int | None = None
    unit_price: int | None = None
    amount: int | None = None
    inventory_id: str | None = None
    maker: str | None = None
    product_name: str | None = None
    type: str | None = None
    note: str | None = None


@dataclass(slots=True)
class SalesInvoice:
    """
    销售请求书。

    说明：
    - subtotal / tax / total_amount 为已开票的存储值，存在时优先使用；
    - 缺失时按 invoice_type 对应税率重新计算（见 rules.totals）。
    """

    invoice_id: str
    invoice_type: InvoiceType
    created_at: datetime
    items: list[InvoiceItem] = field(default_factory=list)
    issued_date: date | None = None
    payment_due_date: date | None = None
    vendor_name: str | None = None
    buyer_name: str | None = None
    staff: str | None = None
    manager: str | None = None
    subtotal: int | None = None
    tax: int | None = None
    insurance: int | None = None
    total_amount: int | None = None
    remarks: str | None = None
