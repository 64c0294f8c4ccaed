from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from tradenavi.core.config import TIMEZONE
from tradenavi.core.dependency import dependency
from tradenavi.core.log import log
from tradenavi.core.models import TradeRecord
from tradenavi.core.protocols import TradeRepository
from tradenavi.core.rules.permissions import can_cancel
from tradenavi.core.rules.presentation import TodoPresentation, get_todo_presentation
from tradenavi.core.rules.todo import (
    advance_trade_todo,
    cancel_trade_record,
    classify_trade,
    get_actor_role,
)
from tradenavi.core.rules.todo_ui import get_todo_definition
from tradenavi.core.rules.trade_rows import RowFilter, SortDirection, TradeRow, build_trade_row, filter_rows, sort_rows


def now_local() -> datetime:
    """当前日本时间（naive，与存储格式一致）。"""
    return datetime.now(ZoneInfo(TIMEZONE)).replace(tzinfo=None)


@dependency
def load_trades_for_user(
    *,
    user_id: str,
    trade_repo: TradeRepository | None = None,
) -> list[TradeRecord]:
    """
    读取用户参与（卖方或买方）的全部交易。

    Args:
        user_id: 用户 ID。
        trade_repo: 交易仓储（可选，自动注入）。

    Returns:
        交易列表（created_at 降序）。
    """
    return trade_repo.list_for_user(user_id)


@dependency
def get_trade(
    *,
    trade_id: str,
    trade_repo: TradeRepository | None = None,
) -> TradeRecord:
    """
    按 ID 读取交易。

    Raises:
        ValueError: 交易不存在。
    """
    trade = trade_repo.find_by_id(trade_id)
    if trade is None:
        raise ValueError(f"交易不存在：{trade_id}")
    return trade


@dependency
def present_trade(
    *,
    trade_id: str,
    viewer_user_id: str,
    trade_repo: TradeRepository | None = None,
) -> TodoPresentation:
    """
    面向查看者生成交易的待办展示（标题/说明/主操作）。

    Raises:
        ValueError: 交易不存在，或查看者不是该交易的当事方。
    """
    trade = get_trade(trade_id=trade_id, trade_repo=trade_repo)
    role = get_actor_role(trade, viewer_user_id)
    if role == "none":
        raise ValueError(f"用户 {viewer_user_id} 不是交易 {trade_id} 的当事方")
    return get_todo_presentation(trade, role)


@dependency
def advance_trade(
    *,
    trade_id: str,
    completed_kind: str,
    actor_user_id: str,
    now: datetime | None = None,
    trade_repo: TradeRepository | None = None,
) -> TradeRecord:
    """
    完成当前待办并写回（承認 / 入金完了 / 確認完了）。

    Args:
        trade_id: 交易 ID。
        completed_kind: 要完成的待办类型，必须是当前待办。
        actor_user_id: 操作者。
        now: 操作时间（默认当前日本时间）。
        trade_repo: 交易仓储（可选，自动注入）。

    Returns:
        推进后的交易记录。

    Raises:
        ValueError: 交易不存在、待办不是当前待办、或操作者不是负责方。
    """
    trade = get_trade(trade_id=trade_id, trade_repo=trade_repo)
    classification = classify_trade(trade, get_actor_role(trade, actor_user_id))
    if not classification.active_todo:
        raise ValueError(f"交易 {trade_id} 已{get_todo_definition(classification.todo_kind).title}，无法推进")
    if classification.todo_kind != completed_kind:
        raise ValueError(
            f"当前待办为 {classification.todo_kind}，不能完成 {completed_kind}"
        )

    updated = advance_trade_todo(trade, completed_kind, actor_user_id, now or now_local())
    if updated is None:
        raise ValueError(f"用户 {actor_user_id} 不是待办 {completed_kind} 的负责方")

    trade_repo.save(updated)
    log(f"[Trade] {trade_id}: {completed_kind} 完成 → {updated.status}")
    return updated


@dependency
def cancel_trade(
    *,
    trade_id: str,
    actor_user_id: str,
    now: datetime | None = None,
    trade_repo: TradeRepository | None = None,
) -> TradeRecord:
    """
    取消交易（关闭全部 open 待办并写入 canceled_at）。

    Raises:
        ValueError: 交易不存在、操作者非当事方、或交易已完了/已取消。
    """
    trade = get_trade(trade_id=trade_id, trade_repo=trade_repo)
    if not can_cancel(trade, actor_user_id):
        raise ValueError(f"交易 {trade_id} 无法由 {actor_user_id} 取消（非当事方或已结束）")

    canceled = cancel_trade_record(trade, now or now_local())
    trade_repo.save(canceled)
    log(f"[Trade] {trade_id}: 已取消")
    return canceled


@dependency
def list_trade_rows(
    *,
    user_id: str,
    row_filter: RowFilter | None = None,
    sort_key: str | None = None,
    direction: SortDirection = "asc",
    trade_repo: TradeRepository | None = None,
) -> list[TradeRow]:
    """
    交易一览：构建列表行，再按条件筛选与排序。

    Args:
        user_id: 查看者。
        row_filter: 筛选条件（None 表示不筛选）。
        sort_key: 排序列（None 保持 created_at 降序）。
        direction: asc / desc。
        trade_repo: 交易仓储（可选，自动注入）。
    """
    rows = [build_trade_row(trade, user_id) for trade in trade_repo.list_for_user(user_id)]
    rows = filter_rows(rows, row_filter or RowFilter())
    return sort_rows(rows, sort_key, direction)
