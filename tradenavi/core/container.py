"""
取引ナビ依赖容器。

职责：
- 创建交易仓储（trades / items / todos 三表）与销售请求书仓储
- 创建 ToDo 报告的 Discord 推送客户端
- 通过 @register 注册，Flow 的 trade_repo / invoice_repo / discord_service 参数自动注入

使用方式：
    # Flow 中自动注入
    @dependency
    def advance_trade(*, trade_id, completed_kind, actor_user_id, trade_repo=None):
        ...

    # 测试时传入内存库仓储
    advance_trade(..., trade_repo=TradeRepo(memory_conn))

注意事项：
    - 交易与请求书共用同一个 SQLite 连接（DB_PATH），进程内缓存
    - 切换 DB_PATH 后调用 reset_db_connection() 重新打开
    - 本模块在 tradenavi/flows/__init__.py 中自动导入
"""

from __future__ import annotations

import sqlite3

from tradenavi.core.dependency import register
from tradenavi.data.client.discord import DiscordClient
from tradenavi.data.db.db_helper import DbHelper
from tradenavi.data.db.invoice_repo import InvoiceRepo
from tradenavi.data.db.trade_repo import TradeRepo

_db_helper: DbHelper | None = None


def get_db_connection() -> sqlite3.Connection:
    """返回交易库连接；首次调用时按 DB_PATH 打开并建表。"""
    global _db_helper
    if _db_helper is None:
        helper = DbHelper()
        helper.init_schema_if_needed()
        _db_helper = helper
    return _db_helper.get_connection()


def reset_db_connection() -> None:
    """关闭缓存的交易库连接，下次取用时按当前 DB_PATH 重新打开。"""
    global _db_helper
    if _db_helper is not None:
        _db_helper.close()
        _db_helper = None


@register("trade_repo")
def get_trade_repo() -> TradeRepo:
    """交易仓储（明细与待办按登记顺序读写）。"""
    return TradeRepo(get_db_connection())


@register("invoice_repo")
def get_invoice_repo() -> InvoiceRepo:
    """销售请求书仓储（ホール / 業者）。"""
    return InvoiceRepo(get_db_connection())


@register("discord_service")
def get_discord_client() -> DiscordClient:
    """ToDo 报告推送客户端；Webhook 地址读取 DISCORD_WEBHOOK_URL。"""
    return DiscordClient()
