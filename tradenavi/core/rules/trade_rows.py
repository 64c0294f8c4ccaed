"""
交易列表行（表格展示用）的构建、筛选与排序。

行数据每次由 TradeRecord 重新推导，不缓存派生结果。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Literal

from tradenavi.core.models import VALID_CATEGORIES, Bucket, Category, Section, TradeRecord
from tradenavi.core.rules.precision import floor_yen, to_decimal
from tradenavi.core.rules.presentation import StatusFilter, matches_status_filter
from tradenavi.core.rules.todo import classify_trade, get_actor_role
from tradenavi.core.rules.todo_ui import get_todo_definition, todo_sort_index
from tradenavi.core.rules.totals import resolve_trade_total

DateTarget = Literal["contract", "shipment", "document"]
SortDirection = Literal["asc", "desc"]

SORTABLE_KEYS = ("status", "contract_date", "partner", "maker", "item_name", "amount", "shipment_date")


@dataclass(slots=True, frozen=True)
class DocumentStatus:
    """书类状态：inspection=検査, removal=撤去, confirmation=確認, other=其他（取消时）。"""

    inspection: bool
    removal: bool
    confirmation: bool
    other: bool


@dataclass(slots=True, frozen=True)
class TradeRow:
    id: str
    navi_id: int | None
    todo_kind: str
    section: Section
    bucket: Bucket
    title: str
    actionable: bool
    contract_date: date | None
    partner: str
    maker: str
    item_name: str
    category: Category
    quantity: int
    amount: int
    shipment_date: date | None
    shipping_method: str
    document_status: DocumentStatus
    payment_completed: bool
    handler: str
    document_sent_date: date | None


@dataclass(slots=True, frozen=True)
class RowFilter:
    """
    列表筛选条件。

    - categories: 勾选的机种类别
    - status: all / in_progress / completed
    - date_target: 日期范围作用于成约日 / 发货日 / 书类发送日
    - keyword: 匹配取引先与机种名（不区分大小写）
    """

    categories: frozenset[str] = frozenset(VALID_CATEGORIES)
    status: StatusFilter = "all"
    handler: str = ""
    date_target: DateTarget = "contract"
    date_from: date | None = None
    date_to: date | None = None
    keyword: str = ""


def _category_of(trade: TradeRecord) -> Category:
    if trade.category in VALID_CATEGORIES:
        return trade.category
    return "others"


def _total_quantity(trade: TradeRecord) -> int:
    # 未填台数按 1 台计
    return sum(
        floor_yen(to_decimal(item.quantity)) if item.quantity is not None else 1
        for item in trade.items
    )


def build_trade_row(trade: TradeRecord, viewer_user_id: str) -> TradeRow:
    """
    构建面向 viewer 的列表行。

    取引先为 viewer 的对方；viewer 非当事方时按卖方视角显示买方。
    """
    role = get_actor_role(trade, viewer_user_id)
    classification = classify_trade(trade, None if role == "none" else role)
    definition = get_todo_definition(classification.todo_kind)
    primary = trade.items[0] if trade.items else None

    if role == "buyer":
        partner = trade.seller.company_name
    else:
        partner = trade.buyer_name or trade.buyer.company_name

    contract_date = trade.contract_date
    if contract_date is None and trade.created_at is not None:
        contract_date = trade.created_at.date()

    completed = classification.bucket == "completed"
    canceled = classification.bucket == "canceled"

    return TradeRow(
        id=trade.id,
        navi_id=trade.navi_id,
        todo_kind=classification.todo_kind,
        section=classification.section,
        bucket=classification.bucket,
        title=definition.title,
        actionable=classification.actionable,
        contract_date=contract_date,
        partner=partner or "",
        maker=(primary.maker if primary and primary.maker else "-"),
        item_name=(primary.item_name if primary and primary.item_name else "商品"),
        category=_category_of(trade),
        quantity=_total_quantity(trade),
        amount=resolve_trade_total(trade),
        shipment_date=trade.shipment_date,
        shipping_method=trade.shipping_method or "未定",
        document_status=DocumentStatus(
            inspection=completed,
            removal=completed,
            confirmation=completed,
            other=canceled,
        ),
        payment_completed=trade.payment_date is not None or completed,
        handler=trade.handler_name or "",
        document_sent_date=trade.document_sent_date,
    )


def _target_date(row: TradeRow, target: DateTarget) -> date | None:
    if target == "shipment":
        return row.shipment_date
    if target == "document":
        return row.document_sent_date
    return row.contract_date


def _matches(row: TradeRow, row_filter: RowFilter) -> bool:
    if row.category not in row_filter.categories:
        return False
    if not matches_status_filter(row_filter.status, row.todo_kind):
        return False
    if row_filter.handler and row.handler != row_filter.handler:
        return False
    if row_filter.date_from or row_filter.date_to:
        target = _target_date(row, row_filter.date_target)
        if target is None:
            return False
        if row_filter.date_from and target < row_filter.date_from:
            return False
        if row_filter.date_to and target > row_filter.date_to:
            return False
    keyword = row_filter.keyword.strip().lower()
    if keyword and keyword not in row.partner.lower() and keyword not in row.item_name.lower():
        return False
    return True


def filter_rows(rows: Iterable[TradeRow], row_filter: RowFilter) -> list[TradeRow]:
    return [row for row in rows if _matches(row, row_filter)]


def _sort_value(row: TradeRow, key: str) -> Any:
    if key == "status":
        return todo_sort_index(row.todo_kind)
    return getattr(row, key)


def sort_rows(rows: Iterable[TradeRow], key: str | None, direction: SortDirection = "asc") -> list[TradeRow]:
    """
    按列排序；值缺失的行总是排在最后。

    未知列名时保持原顺序。
    """
    rows = list(rows)
    if key not in SORTABLE_KEYS:
        return rows
    present = [row for row in rows if _sort_value(row, key) is not None]
    missing = [row for row in rows if _sort_value(row, key) is None]
    present.sort(key=lambda row: _sort_value(row, key), reverse=direction == "desc")
    return present + missing
