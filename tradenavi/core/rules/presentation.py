"""待办展示：标题/说明/主操作查表，以及页签筛选。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tradenavi.core.models import Bucket, Section, TodoItem, TradeRecord
from tradenavi.core.rules.todo import classify_trade, ensure_trade_todos, get_open_todo
from tradenavi.core.rules.todo_ui import PrimaryAction, bucket_for_kind, get_todo_definition

StatusFilter = Literal["all", "in_progress", "completed"]


@dataclass(slots=True, frozen=True)
class TodoPresentation:
    """
    单笔交易面向某一方的展示数据。

    - primary_action 仅在查看者就是执行方、且待办仍 active 时提供
    - active_todo 为当前 open 的待办事件（可能为 None）
    """

    todos: list[TodoItem]
    active_todo: TodoItem | None
    todo_kind: str
    section: Section
    bucket: Bucket
    title: str
    description: str
    primary_action: PrimaryAction | None
    assignee: str


def get_todo_presentation(trade: TradeRecord, viewer_role: str) -> TodoPresentation:
    todos = ensure_trade_todos(trade)
    classification = classify_trade(trade, viewer_role)
    definition = get_todo_definition(classification.todo_kind)

    active_todo = None
    if classification.active_todo:
        open_todo = get_open_todo(todos)
        if open_todo is not None and open_todo.kind == classification.todo_kind:
            active_todo = open_todo

    action = definition.primary_action
    if action is None or action.role != viewer_role or not classification.active_todo:
        action = None

    return TodoPresentation(
        todos=todos,
        active_todo=active_todo,
        todo_kind=classification.todo_kind,
        section=classification.section,
        bucket=classification.bucket,
        title=definition.title,
        description=definition.description_for(viewer_role),
        primary_action=action,
        assignee=classification.assignee,
    )


def matches_status_filter(status_filter: StatusFilter | str, todo_kind: str) -> bool:
    """
    列表页签筛选。

    - all: 全部
    - in_progress: 未完了且未取消
    - completed: 完了或取消
    """
    if status_filter == "all":
        return True
    bucket = bucket_for_kind(todo_kind)
    if status_filter == "in_progress":
        return bucket not in ("completed", "canceled")
    if status_filter == "completed":
        return bucket in ("completed", "canceled")
    return True
