from __future__ import annotations

from typing import Protocol

from tradenavi.core.models import InvoiceType, SalesInvoice, TradeRecord

# ============================================================================
# Repository 接口（数据访问层协议）
# ============================================================================


class TradeRepository(Protocol):
    """
    交易存取。

    约定：返回的 TradeRecord 已是规范形状（旧数据的形状差异在仓储边界消化）。
    """

    def find_by_id(self, trade_id: str) -> TradeRecord | None:
        """按 ID 读取，未找到返回 None。"""

    def list_all(self) -> list[TradeRecord]:
        """返回全部交易，按 created_at 降序。"""

    def list_for_user(self, user_id: str) -> list[TradeRecord]:
        """返回 user_id 作为卖方或买方参与的交易，按 created_at 降序。"""

    def add(self, trade: TradeRecord) -> TradeRecord:
        """新增交易（含明细与待办），ID 已存在时抛 ValueError。"""

    def save(self, trade: TradeRecord) -> None:
        """整体覆盖保存（推进/取消后写回）。"""


class InvoiceRepository(Protocol):
    """销售请求书存取。"""

    def get(self, invoice_id: str) -> SalesInvoice | None:
        """按 ID 读取，未找到返回 None。"""

    def list_all(self, invoice_type: InvoiceType | None = None) -> list[SalesInvoice]:
        """返回请求书列表，可按类型过滤，按 created_at 降序。"""

    def add(self, invoice: SalesInvoice) -> SalesInvoice:
        """新增请求书（含明细）。"""


# ============================================================================
# Service 接口
# ============================================================================


class ReportProtocol(Protocol):
    """报告发送协议（例如 Discord Webhook）。"""

    def send(self, text: str) -> bool:
        """
        发送文本报告。

        Returns:
            True=发送成功，False=未配置或发送失败。
        """
