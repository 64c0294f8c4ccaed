"""交易操作权限判定（基于推导出的当前待办，而非存储状态）。"""

from __future__ import annotations

from tradenavi.core.models import TradeRecord
from tradenavi.core.rules.todo import classify_trade, get_actor_role

__all__ = [
    "get_actor_role",
    "can_approve",
    "can_mark_paid",
    "can_mark_completed",
    "can_cancel",
]


def _can_complete(trade: TradeRecord, user_id: str, kind: str) -> bool:
    role = get_actor_role(trade, user_id)
    if role == "none":
        return False
    classification = classify_trade(trade, role)
    return classification.todo_kind == kind and classification.actionable


def can_approve(trade: TradeRecord, user_id: str) -> bool:
    """当前为承認待ち且操作者为负责方。"""
    return _can_complete(trade, user_id, "application_sent")


def can_mark_paid(trade: TradeRecord, user_id: str) -> bool:
    return _can_complete(trade, user_id, "application_approved")


def can_mark_completed(trade: TradeRecord, user_id: str) -> bool:
    return _can_complete(trade, user_id, "payment_confirmed")


def can_cancel(trade: TradeRecord, user_id: str) -> bool:
    """当事方且交易未完了/未取消。"""
    if get_actor_role(trade, user_id) == "none":
        return False
    return classify_trade(trade).bucket not in ("completed", "canceled")
