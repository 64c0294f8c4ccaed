"""
金额合计规则（小计 / 消费税 / 合计）。

口径：
- 行金额 = amount（非 None 时）否则 quantity × unit_price；
- 消费税 = floor(课税小计 × 税率)，截断而非四舍五入；
- 合计 = 小计 + 消费税 + 保险费 + 运费，各附加费缺失按 0；
- 任意输入非法按 0 处理，函数总是返回完整结果。
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol

from tradenavi.core.models import InvoiceType, SalesInvoice, TradeRecord
from tradenavi.core.rules.precision import floor_yen, to_decimal, to_rate

DEFAULT_TAX_RATE = Decimal("0.10")

# 业务规则：ホール向け请求书与業者向け请求书税率不同
INVOICE_TAX_RATES: dict[str, Decimal] = {
    "hall": Decimal("0.05"),
    "vendor": Decimal("0.10"),
}


class LineItem(Protocol):
    """可参与合计的明细行（StatementItem / InvoiceItem 均满足）。"""

    quantity: object
    unit_price: object
    amount: object


@dataclass(slots=True, frozen=True)
class Totals:
    """
    合计结果（日元整数）。

    - taxable_subtotal: 课税对象小计（is_taxable=False 的行不计入）
    - subtotal: 全部行的小计（税前）
    - tax: 消费税
    - insurance / shipping: 附加费
    - total: 合计
    """

    taxable_subtotal: int
    subtotal: int
    tax: int
    insurance: int
    shipping: int
    total: int


def line_amount(item: LineItem) -> Decimal:
    """返回单行金额；amount 优先，否则 quantity × unit_price。"""
    if item.amount is not None:
        return to_decimal(item.amount)
    return to_decimal(item.quantity) * to_decimal(item.unit_price)


def calculate_totals(
    items: Iterable[LineItem],
    tax_rate: object = DEFAULT_TAX_RATE,
    *,
    insurance: object = None,
    shipping: object = None,
) -> Totals:
    """
    按明细与税率计算小计/消费税/合计。

    Args:
        items: 明细行序列。
        tax_rate: 税率（0.05 / 0.10 等），无效时回退 DEFAULT_TAX_RATE。
        insurance: 保险费，缺失按 0。
        shipping: 运费，缺失按 0。

    Returns:
        Totals。示例：10 台 × 128,000 @ 0.1 → 1,280,000 / 128,000 / 1,408,000。
    """
    rate = to_rate(tax_rate, DEFAULT_TAX_RATE)
    subtotal = Decimal("0")
    taxable = Decimal("0")
    for item in items:
        amount = line_amount(item)
        subtotal += amount
        if getattr(item, "is_taxable", True) is not False:
            taxable += amount

    subtotal_yen = floor_yen(subtotal)
    taxable_yen = floor_yen(taxable)
    # 税额按未取整的课税小计计算
    tax = floor_yen(taxable * rate)
    insurance_yen = floor_yen(to_decimal(insurance))
    shipping_yen = floor_yen(to_decimal(shipping))
    return Totals(
        taxable_subtotal=taxable_yen,
        subtotal=subtotal_yen,
        tax=tax,
        insurance=insurance_yen,
        shipping=shipping_yen,
        total=subtotal_yen + tax + insurance_yen + shipping_yen,
    )


def tax_rate_for_invoice(invoice_type: InvoiceType | str) -> Decimal:
    """ホール=5%，業者=10%；未知类型按業者处理。"""
    return INVOICE_TAX_RATES.get(invoice_type, INVOICE_TAX_RATES["vendor"])


def calculate_invoice_totals(invoice: SalesInvoice) -> Totals:
    """
    计算请求书合计。

    已开票的 subtotal / tax / total_amount 存在时优先使用（存储值为权威），
    缺失的部分按 invoice_type 税率补算。
    """
    computed = calculate_totals(
        invoice.items,
        tax_rate_for_invoice(invoice.invoice_type),
        insurance=invoice.insurance,
    )
    subtotal = invoice.subtotal if invoice.subtotal is not None else computed.subtotal
    if invoice.tax is not None:
        tax = invoice.tax
    elif invoice.subtotal is None:
        tax = computed.tax
    else:
        tax = floor_yen(Decimal(subtotal) * tax_rate_for_invoice(invoice.invoice_type))
    if invoice.total_amount is not None:
        total = invoice.total_amount
    else:
        total = subtotal + tax + computed.insurance
    return Totals(
        taxable_subtotal=subtotal,
        subtotal=subtotal,
        tax=tax,
        insurance=computed.insurance,
        shipping=0,
        total=total,
    )


def calculate_trade_totals(trade: TradeRecord) -> Totals:
    """按交易自身税率（缺省 10%）与保险费/运费计算合计。"""
    return calculate_totals(
        trade.items,
        trade.tax_rate if trade.tax_rate is not None else DEFAULT_TAX_RATE,
        insurance=trade.insurance_fee,
        shipping=trade.shipping_fee,
    )


def resolve_trade_total(trade: TradeRecord) -> int:
    """交易合计：total_amount 存在时为权威值，否则每次重新计算。"""
    if trade.total_amount is not None:
        return trade.total_amount
    return calculate_trade_totals(trade).total
