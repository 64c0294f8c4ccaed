from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TodoKind = Literal[
    "application_sent",
    "application_approved",
    "payment_confirmed",
    "trade_completed",
    "trade_canceled",
]
"""待办类型：交易当前需要某一方完成的动作。"""

TodoState = Literal["open", "done"]

Section = Literal["approval", "payment", "confirmation", "completed", "canceled"]
"""待办定义所属的细分区段。"""

Bucket = Literal["approval", "in_progress", "completed", "canceled"]
"""列表页签使用的粗粒度分组。"""


@dataclass(slots=True, frozen=True)
class TodoItem:
    """
    待办事件。

    - kind: 待办类型
    - assignee: 负责完成的一方（buyer/seller）
    - status: open=待处理，done=已完成
    """

    kind: str
    assignee: str
    status: TodoState
