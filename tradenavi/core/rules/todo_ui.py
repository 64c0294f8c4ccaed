"""
待办定义表（TodoKind → 标题/说明/区段/主操作）。

静态查表，覆盖全部 TodoKind；未知类型回退到 approval 区段的通用定义。
"""

from __future__ import annotations

from dataclasses import dataclass

from tradenavi.core.models import Bucket, Role, Section


@dataclass(slots=True, frozen=True)
class PrimaryAction:
    """主操作：由 role 一方执行，完成后追加 next_todo。"""

    label: str
    role: Role
    next_todo: str | None = None


@dataclass(slots=True, frozen=True)
class TodoDefinition:
    section: Section
    title: str
    description_buyer: str
    description_seller: str
    primary_action: PrimaryAction | None = None

    def description_for(self, role: str) -> str:
        return self.description_seller if role == "seller" else self.description_buyer


TODO_UI_MAP: dict[str, TodoDefinition] = {
    "application_sent": TodoDefinition(
        section="approval",
        title="承認待ち",
        description_buyer="売主から依頼が届いています。内容を確認し、承認してください。",
        description_seller="依頼を送りました。買主様からの承認をお待ちください。",
        primary_action=PrimaryAction(label="承認", role="buyer", next_todo="application_approved"),
    ),
    "application_approved": TodoDefinition(
        section="payment",
        title="入金待ち",
        description_buyer="発送予定日までに振込をお願いします。",
        description_seller="買主様からの入金をお待ちください。",
        primary_action=PrimaryAction(label="入金完了", role="buyer", next_todo="payment_confirmed"),
    ),
    "payment_confirmed": TodoDefinition(
        section="confirmation",
        title="確認待ち",
        description_buyer="動作確認を行い、問題なければ完了してください。",
        description_seller="買主様の確認をお待ちください。",
        primary_action=PrimaryAction(label="確認完了", role="buyer", next_todo="trade_completed"),
    ),
    "trade_completed": TodoDefinition(
        section="completed",
        title="完了",
        description_buyer="取引が完了しました。",
        description_seller="取引が完了しました。",
    ),
    "trade_canceled": TodoDefinition(
        section="canceled",
        title="キャンセル",
        description_buyer="この取引はキャンセルされました。",
        description_seller="この取引はキャンセルされました。",
    ),
}

FALLBACK_DEFINITION = TodoDefinition(
    section="approval",
    title="確認中",
    description_buyer="取引内容を確認しています。",
    description_seller="取引内容を確認しています。",
)

# 状态排序用（列表 status 列）
TODO_ORDER: tuple[str, ...] = (
    "application_sent",
    "application_approved",
    "payment_confirmed",
    "trade_completed",
    "trade_canceled",
)

_SECTION_BUCKETS: dict[str, Bucket] = {
    "approval": "approval",
    "payment": "in_progress",
    "confirmation": "in_progress",
    "completed": "completed",
    "canceled": "canceled",
}


def get_todo_definition(kind: str | None) -> TodoDefinition:
    """按 kind 查定义；None/未知类型返回 FALLBACK_DEFINITION。"""
    if kind is None:
        return FALLBACK_DEFINITION
    return TODO_UI_MAP.get(kind, FALLBACK_DEFINITION)


def default_assignee(kind: str) -> Role:
    """待办的默认负责方：主操作的执行方，无主操作时为 buyer。"""
    action = get_todo_definition(kind).primary_action
    return action.role if action else "buyer"


def section_bucket(section: str) -> Bucket:
    """细分区段 → 页签分组；未知区段归入 approval。"""
    return _SECTION_BUCKETS.get(section, "approval")


def bucket_for_kind(kind: str | None) -> Bucket:
    return section_bucket(get_todo_definition(kind).section)


def todo_sort_index(kind: str) -> int:
    """TODO_ORDER 中的位置；未知类型排在最后。"""
    try:
        return TODO_ORDER.index(kind)
    except ValueError:
        return len(TODO_ORDER)
