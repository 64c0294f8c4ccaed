from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

import pytest

from tradenavi.core.models import CompanyProfile, StatementItem, TodoItem, TradeRecord
from tradenavi.data.db.db_helper import DbHelper
from tradenavi.data.db.invoice_repo import InvoiceRepo
from tradenavi.data.db.trade_repo import TradeRepo

SELLER_ID = "u-seller"
BUYER_ID = "u-buyer"


@pytest.fixture()
def db_helper() -> Iterator[DbHelper]:
    """内存 SQLite，每个测试独立。"""
    helper = DbHelper(":memory:")
    helper.init_schema_if_needed()
    yield helper
    helper.close()


@pytest.fixture()
def trade_repo(db_helper: DbHelper) -> TradeRepo:
    return TradeRepo(db_helper.get_connection())


@pytest.fixture()
def invoice_repo(db_helper: DbHelper) -> InvoiceRepo:
    return InvoiceRepo(db_helper.get_connection())


def make_trade(
    trade_id: str = "T-1",
    *,
    todos: list[TodoItem] | None = None,
    items: list[StatementItem] | None = None,
    **fields,
) -> TradeRecord:
    """构造测试用交易：默认 10 台 × 128,000、无待办、无日期。"""
    fields.setdefault("created_at", datetime(2024, 4, 1, 9, 0))
    return TradeRecord(
        id=trade_id,
        seller=CompanyProfile(user_id=SELLER_ID, company_name="セラー商事"),
        buyer=CompanyProfile(user_id=BUYER_ID, company_name="バイヤー遊技"),
        items=items
        if items is not None
        else [StatementItem(item_name="P大海物語5", maker="三洋", quantity=10, unit_price=128000)],
        todos=todos or [],
        **fields,
    )


def todo(kind: str, status: str = "open", assignee: str = "buyer") -> TodoItem:
    return TodoItem(kind=kind, assignee=assignee, status=status)  # type: ignore[arg-type]
