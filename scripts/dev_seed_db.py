"""开发环境数据初始化脚本。

职责：
- 初始化开发用 SQLite 数据：覆盖各待办阶段的样例交易 + ホール/業者请求书
- 创建可复现的演示场景（买方 u-buyer / 卖方 u-seller）

使用方式：
    SEED_RESET=1 python -m scripts.dev_seed_db
    python -m tradenavi.cli.trade list --user u-buyer

环境变量：
    SEED_RESET: 是否重置核心表数据（默认 1）
"""

from __future__ import annotations

import os
from datetime import date, datetime, timedelta

from tradenavi.core.config import load_env
from tradenavi.core.log import log
from tradenavi.core.models import CompanyProfile, InvoiceItem, SalesInvoice, StatementItem, TradeRecord
from tradenavi.core.rules.todo import cancel_trade_record, derive_trade_status, ensure_trade_todos
from tradenavi.data.db.db_helper import DbHelper
from tradenavi.data.db.invoice_repo import InvoiceRepo
from tradenavi.data.db.trade_repo import TradeRepo

_SEED_TABLES = ("trade_todos", "trade_items", "trades", "sales_invoice_items", "sales_invoices")


def _seller() -> CompanyProfile:
    return CompanyProfile(user_id="u-seller", company_name="株式会社セラー商事", tel="03-0000-0001")


def _buyer() -> CompanyProfile:
    return CompanyProfile(user_id="u-buyer", company_name="バイヤー遊技株式会社", tel="06-0000-0002")


def _trade(
    trade_id: str,
    navi_id: int,
    created: datetime,
    items: list[StatementItem],
    **fields,
) -> TradeRecord:
    trade = TradeRecord(
        id=trade_id,
        navi_id=navi_id,
        seller=_seller(),
        buyer=_buyer(),
        items=items,
        created_at=created,
        updated_at=created,
        **fields,
    )
    trade.todos = ensure_trade_todos(trade)
    trade.status = derive_trade_status(trade)
    return trade


def _build_trades(today: date) -> list[TradeRecord]:
    base = datetime.combine(today, datetime.min.time())
    trades = [
        _trade(
            "T-001",
            1001,
            base - timedelta(days=1),
            [StatementItem(item_name="P大海物語5", maker="三洋", quantity=10, unit_price=128000)],
            category="pachinko",
            handler_name="佐藤",
            shipping_method="発送",
            shipment_date=today + timedelta(days=5),
        ),
        _trade(
            "T-002",
            1002,
            base - timedelta(days=3),
            [StatementItem(item_name="スマスロ北斗の拳", maker="サミー", quantity=4, unit_price=450000)],
            category="slot",
            handler_name="鈴木",
            contract_date=today - timedelta(days=3),
            shipping_method="引取",
        ),
        _trade(
            "T-003",
            1003,
            base - timedelta(days=7),
            [
                StatementItem(item_name="Pエヴァンゲリオン", maker="ビスティ", quantity=2, unit_price=300000),
                StatementItem(item_name="運搬用パレット", quantity=1, unit_price=5000, is_taxable=False),
            ],
            category="pachinko",
            handler_name="佐藤",
            contract_date=today - timedelta(days=7),
            payment_date=today - timedelta(days=2),
            insurance_fee=3000,
        ),
        _trade(
            "T-004",
            1004,
            base - timedelta(days=20),
            [StatementItem(item_name="ジャグラー", maker="北電子", quantity=6, unit_price=80000)],
            category="slot",
            contract_date=today - timedelta(days=20),
            payment_date=today - timedelta(days=15),
            completed_at=base - timedelta(days=10),
            document_sent_date=today - timedelta(days=12),
        ),
    ]
    trades.append(
        cancel_trade_record(
            _trade(
                "T-005",
                1005,
                base - timedelta(days=30),
                [StatementItem(item_name="各台計数機", maker="-", quantity=3, unit_price=20000)],
                category="others",
            ),
            now=base - timedelta(days=28),
        )
    )
    return trades


def _build_invoices(today: date) -> list[SalesInvoice]:
    created = datetime.combine(today, datetime.min.time())
    return [
        SalesInvoice(
            invoice_id="INV-H-001",
            invoice_type="hall",
            created_at=created,
            issued_date=today,
            payment_due_date=today + timedelta(days=30),
            buyer_name="パーラー駅前",
            staff="佐藤",
            insurance=2000,
            items=[
                InvoiceItem(maker="三洋", product_name="P大海物語5", type="パチンコ", quantity=5, unit_price=120000),
            ],
        ),
        SalesInvoice(
            invoice_id="INV-V-001",
            invoice_type="vendor",
            created_at=created - timedelta(days=1),
            issued_date=today - timedelta(days=1),
            vendor_name="株式会社トレード",
            staff="鈴木",
            items=[
                InvoiceItem(maker="サミー", product_name="スマスロ北斗の拳", type="スロット", quantity=2, unit_price=450000),
            ],
            subtotal=900000,
            tax=90000,
            total_amount=990000,
        ),
    ]


def main() -> None:
    """
    初始化开发用 SQLite 数据。

    行为：可通过 SEED_RESET 控制是否先清空核心表。
    """
    load_env()
    helper = DbHelper()
    helper.init_schema_if_needed()
    conn = helper.get_connection()

    if os.getenv("SEED_RESET", "1") == "1":
        with conn:
            for table in _SEED_TABLES:
                conn.execute(f"DELETE FROM {table}")
        log(f"[DevSeed] 已重置核心表数据：{', '.join(_SEED_TABLES)}")

    today = date.today()
    trade_repo = TradeRepo(conn)
    for trade in _build_trades(today):
        if trade_repo.exists(trade.id):
            continue
        trade_repo.add(trade)
        log(f"[DevSeed] 交易 {trade.id}（{trade.status}）")

    invoice_repo = InvoiceRepo(conn)
    for invoice in _build_invoices(today):
        if invoice_repo.get(invoice.invoice_id) is None:
            invoice_repo.add(invoice)
    log("[DevSeed] 已添加请求书：ホール 1 件 / 業者 1 件")

    log("\n✅ 开发数据初始化完成！")


if __name__ == "__main__":
    main()
