from .invoice import InvoiceItem, InvoiceType, SalesInvoice
from .todo import Bucket, Section, TodoItem, TodoKind, TodoState
from .trade import (
    VALID_CATEGORIES,
    ActorRole,
    Category,
    CompanyProfile,
    Role,
    StatementItem,
    TradeRecord,
    TradeStatus,
)

"""
领域模型聚合导出。

说明：
- 仅做名称聚合，不引入额外逻辑，便于上层模块统一引用；
- 规则/仓储代码也可以直接从各子模块导入。
"""

__all__ = [
    # 交易
    "TradeRecord",
    "TradeStatus",
    "CompanyProfile",
    "StatementItem",
    "Category",
    "VALID_CATEGORIES",
    "Role",
    "ActorRole",
    # 待办
    "TodoItem",
    "TodoKind",
    "TodoState",
    "Section",
    "Bucket",
    # 请求书
    "SalesInvoice",
    "InvoiceItem",
    "InvoiceType",
]
