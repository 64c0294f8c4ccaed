"""
交易待办判定与推进规则。

判定口径：
- 取消优先：canceled_at / status=CANCELED / 存在 trade_canceled 待办 → 取消（终态）；
- 否则按固定顺序检查三个 checkpoint，第一个未满足的即当前待办；
- checkpoint 满足条件：同类 done 待办 或 对应日期已写入 或 存储状态已越过该步；
  最后一步的日期为 completed_at，或入金日与出荷日同时写入；
- 数据矛盾时（后一步已满足而前一步未满足）前一步优先；
- 全部满足 → 完了。

所有函数均为纯函数：不修改入参，字段缺失视为"未满足"，不抛异常。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable

from tradenavi.core.models import ActorRole, Bucket, Section, TodoItem, TradeRecord, TradeStatus
from tradenavi.core.rules.todo_ui import (
    default_assignee,
    get_todo_definition,
    section_bucket,
)
from tradenavi.core.rules.totals import resolve_trade_total

CHECKPOINTS: tuple[str, ...] = (
    "application_sent",
    "application_approved",
    "payment_confirmed",
)

# 存储状态越过了第几个 checkpoint（>index 视为该 checkpoint 已满足）
_STATUS_RANK: dict[str, int] = {
    "DRAFT": 0,
    "SENT": 0,
    "APPROVAL_REQUIRED": 0,
    "APPROVED": 1,
    "PAYMENT_REQUIRED": 1,
    "CONFIRM_REQUIRED": 2,
    "COMPLETED": 3,
}

SECTION_TO_TRADE_STATUS: dict[str, TradeStatus] = {
    "approval": "APPROVAL_REQUIRED",
    "payment": "PAYMENT_REQUIRED",
    "confirmation": "CONFIRM_REQUIRED",
    "completed": "COMPLETED",
    "canceled": "CANCELED",
}

DEFAULT_PAYMENT_METHOD = "振込"


@dataclass(slots=True, frozen=True)
class TodoClassification:
    """
    待办判定结果。

    - todo_kind: 当前待办类型
    - section / bucket: 细分区段与页签分组
    - active_todo: 是否仍有待处理动作（完了/取消为 False）
    - assignee: 当前待办的负责方
    - actionable: 查看者是否就是负责方（仅 active_todo 时可能为 True）
    """

    todo_kind: str
    section: Section
    bucket: Bucket
    active_todo: bool
    assignee: str
    actionable: bool


# ========== 角色 ==========


def get_actor_role(trade: TradeRecord, user_id: str | None) -> ActorRole:
    """按用户 ID 判断其在交易中的立场；非当事方返回 none。"""
    if not user_id:
        return "none"
    if trade.buyer_id and trade.buyer_id == user_id:
        return "buyer"
    if trade.seller_id and trade.seller_id == user_id:
        return "seller"
    return "none"


# ========== 待办事件 ==========


def get_open_todo(todos: Iterable[TodoItem]) -> TodoItem | None:
    """返回第一个 open 待办，没有则 None。"""
    for todo in todos:
        if todo.status == "open":
            return todo
    return None


def complete_todo(todos: Iterable[TodoItem], completed_kind: str) -> list[TodoItem]:
    """
    将 completed_kind 标记为 done，并按定义追加下一步 open 待办。

    Returns:
        新列表（入参不变）。
    """
    updated = [
        TodoItem(kind=t.kind, assignee=t.assignee, status="done") if t.kind == completed_kind else t
        for t in todos
    ]
    action = get_todo_definition(completed_kind).primary_action
    if action is None or action.next_todo is None:
        return updated
    updated.append(TodoItem(kind=action.next_todo, assignee=action.role, status="open"))
    return updated


def build_todos_from_status(status: str | None) -> list[TodoItem]:
    """由存储状态补建待办历史（旧数据没有 todos 时使用）。"""

    def item(kind: str, state: str) -> TodoItem:
        return TodoItem(kind=kind, assignee=default_assignee(kind), status=state)  # type: ignore[arg-type]

    if status == "CANCELED":
        return [item("trade_canceled", "done")]
    if status == "COMPLETED":
        return [item(kind, "done") for kind in (*CHECKPOINTS, "trade_completed")]
    rank = _STATUS_RANK.get(status or "", 0)
    todos = [item(kind, "done") for kind in CHECKPOINTS[:rank]]
    todos.append(item(CHECKPOINTS[rank], "open"))
    return todos


# ========== 判定 ==========


def is_canceled(trade: TradeRecord) -> bool:
    """取消标记：任一条件成立即为取消，且为终态。"""
    if trade.canceled_at is not None or trade.status == "CANCELED":
        return True
    return any(t.kind == "trade_canceled" for t in trade.todos)


def _checkpoint_satisfied(trade: TradeRecord, index: int, done_kinds: set[str]) -> bool:
    if CHECKPOINTS[index] in done_kinds:
        return True
    if index == 0:
        stamped = trade.contract_date is not None
    elif index == 1:
        stamped = trade.payment_date is not None
    else:
        # 入金日与出荷日都已写入即视为确认完了
        stamped = trade.completed_at is not None or (
            trade.payment_date is not None and trade.shipment_date is not None
        )
    if stamped:
        return True
    return _STATUS_RANK.get(trade.status or "", 0) > index


def _assignee_for(trade: TradeRecord, kind: str) -> str:
    for todo in trade.todos:
        if todo.kind == kind and todo.status == "open":
            return todo.assignee
    return default_assignee(kind)


def classify_trade(trade: TradeRecord, role: str | None = None) -> TodoClassification:
    """
    判定交易的当前待办。

    Args:
        trade: 交易记录（只读）。
        role: 查看者立场（buyer/seller），用于计算 actionable；None 表示不关心。

    Returns:
        TodoClassification。空记录返回最早的 application_sent。
    """
    kind = "trade_completed"
    active = False
    if is_canceled(trade):
        kind = "trade_canceled"
    else:
        done_kinds = {t.kind for t in trade.todos if t.status == "done"}
        for index, checkpoint in enumerate(CHECKPOINTS):
            if not _checkpoint_satisfied(trade, index, done_kinds):
                kind = checkpoint
                active = True
                break

    definition = get_todo_definition(kind)
    assignee = _assignee_for(trade, kind)
    return TodoClassification(
        todo_kind=kind,
        section=definition.section,
        bucket=section_bucket(definition.section),
        active_todo=active,
        assignee=assignee,
        actionable=active and role is not None and role == assignee,
    )


def resolve_current_todo_kind(trade: TradeRecord) -> str:
    return classify_trade(trade).todo_kind


def derive_trade_status(trade: TradeRecord) -> TradeStatus:
    """由待办区段推导交易状态（APPROVAL_REQUIRED ... CANCELED）。"""
    section = classify_trade(trade).section
    return SECTION_TO_TRADE_STATUS.get(section, "APPROVAL_REQUIRED")


def ensure_trade_todos(trade: TradeRecord) -> list[TodoItem]:
    """已有 todos 直接返回副本；否则按推导状态补建。"""
    if trade.todos:
        return list(trade.todos)
    return build_todos_from_status(derive_trade_status(trade))


# ========== 推进 / 取消 ==========


def advance_trade_todo(
    trade: TradeRecord,
    completed_kind: str,
    actor_user_id: str,
    now: datetime | None = None,
) -> TradeRecord | None:
    """
    完成当前待办并返回推进后的新交易记录。

    规则：
    - completed_kind 必须是当前 active 待办；
    - 操作者必须是该待办的负责方；
    - application_sent → 写入成约日（已有则保留）；
    - application_approved → 写入入金日、入金额（合计）、入金方式；
    - payment_confirmed → 写入完了时间。

    Returns:
        新 TradeRecord；不满足条件时返回 None。
    """
    classification = classify_trade(trade)
    if not classification.active_todo or classification.todo_kind != completed_kind:
        return None
    if get_actor_role(trade, actor_user_id) != classification.assignee:
        return None

    now = now or datetime.now()
    # 前序 checkpoint 已由日期/状态满足时，残留的 open 待办一并关闭
    earlier = set(CHECKPOINTS[: CHECKPOINTS.index(completed_kind)])
    todos = [
        TodoItem(kind=t.kind, assignee=t.assignee, status="done")
        if t.kind in earlier and t.status == "open"
        else t
        for t in ensure_trade_todos(trade)
    ]
    if not any(t.kind == completed_kind for t in todos):
        todos.append(TodoItem(kind=completed_kind, assignee=classification.assignee, status="open"))
    updated = replace(trade, todos=complete_todo(todos, completed_kind), updated_at=now)

    if completed_kind == "application_sent":
        updated = replace(updated, contract_date=trade.contract_date or now.date())
    elif completed_kind == "application_approved":
        updated = replace(
            updated,
            payment_date=now.date(),
            payment_amount=resolve_trade_total(trade),
            payment_method=trade.payment_method or DEFAULT_PAYMENT_METHOD,
        )
    elif completed_kind == "payment_confirmed":
        updated = replace(updated, completed_at=now)

    return replace(updated, status=derive_trade_status(updated))


def cancel_trade_todos(trade: TradeRecord) -> list[TodoItem]:
    """关闭全部 open 待办，并追加一条 done 的 trade_canceled（已存在则不重复）。"""
    closed = [
        TodoItem(kind=t.kind, assignee=t.assignee, status="done") if t.status == "open" else t
        for t in ensure_trade_todos(trade)
    ]
    if any(t.kind == "trade_canceled" for t in closed):
        return closed
    closed.append(
        TodoItem(kind="trade_canceled", assignee=default_assignee("trade_canceled"), status="done")
    )
    return closed


def cancel_trade_record(trade: TradeRecord, now: datetime | None = None) -> TradeRecord:
    """返回取消后的新交易记录（canceled_at 已有则保留）。"""
    now = now or datetime.now()
    return replace(
        trade,
        todos=cancel_trade_todos(trade),
        status="CANCELED",
        canceled_at=trade.canceled_at or now,
        updated_at=now,
    )
