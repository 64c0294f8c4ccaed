from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from .todo import TodoItem

Role = Literal["buyer", "seller"]
"""交易当事方角色。"""

ActorRole = Literal["buyer", "seller", "none"]
"""查看者角色（非当事方为 none）。"""

Category = Literal["pachinko", "slot", "others"]

TradeStatus = Literal[
    "DRAFT",
    "SENT",
    "APPROVAL_REQUIRED",
    "APPROVED",
    "PAYMENT_REQUIRED",
    "CONFIRM_REQUIRED",
    "COMPLETED",
    "CANCELED",
]
"""存储层的交易状态（含旧数据中的 DRAFT/SENT/APPROVED）。"""

VALID_CATEGORIES: tuple[Category, ...] = ("pachinko", "slot", "others")


@dataclass(slots=True)
class CompanyProfile:
    """交易一方的公司信息。"""

    user_id: str | None = None
    company_name: str = ""
    address: str | None = None
    tel: str | None = None
    contact_name: str | None = None


@dataclass(slots=True)
class StatementItem:
    """
    明细行（机台）。

    说明：
    - 金额单位为日元整数；
    - amount 为空时按 quantity × unit_price 计算；
    - 列表顺序即展示顺序。
    """

    item_name: str
    maker: str | None = None
    quantity: int | None = None
    unit_price: int | None = None
    amount: int | None = None
    is_taxable: bool = True
    category: str | None = None
    line_id: str | None = None
    note: str | None = None


@dataclass(slots=True)
class TradeRecord:
    """
    一笔 Navi 交易（买卖双方之间的一次成交）。

    说明：
    - 由上游建单流程写入，本包内的规则只读，推进/取消时返回新对象；
    - todos 为事件记录，checkpoint 日期与 status 为辅助依据；
    - total_amount 存在时视为权威值，否则每次读取时重新计算；
    - seller_user_id / buyer_user_id / buyer_name 为冗余字段，优先于 profile。
    """

    id: str
    seller: CompanyProfile
    buyer: CompanyProfile
    items: list[StatementItem] = field(default_factory=list)
    navi_id: int | None = None
    status: TradeStatus | None = None
    todos: list[TodoItem] = field(default_factory=list)

    seller_user_id: str | None = None
    buyer_user_id: str | None = None
    buyer_name: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    contract_date: date | None = None
    shipment_date: date | None = None
    document_sent_date: date | None = None
    payment_date: date | None = None
    completed_at: datetime | None = None
    canceled_at: datetime | None = None

    category: Category | None = None
    tax_rate: Decimal | None = None
    insurance_fee: int | None = None
    shipping_fee: int | None = None
    total_amount: int | None = None
    payment_amount: int | None = None
    payment_method: str | None = None

    handler_name: str | None = None
    shipping_method: str | None = None
    remarks: str | None = None

    @property
    def seller_id(self) -> str | None:
        """卖方用户 ID（冗余字段优先）。"""
        return self.seller_user_id or self.seller.user_id

    @property
    def buyer_id(self) -> str | None:
        """买方用户 ID（冗余字段优先）。"""
        return self.buyer_user_id or self.buyer.user_id
