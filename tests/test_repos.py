from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from conftest import BUYER_ID, SELLER_ID, make_trade, todo

from tradenavi.core.models import CompanyProfile, InvoiceItem, SalesInvoice, StatementItem
from tradenavi.data.db.db_helper import SCHEMA_VERSION, DbHelper


def test_trade_roundtrip_keeps_order_and_fields(trade_repo):
    trade = make_trade(
        "T-1",
        navi_id=1001,
        items=[
            StatementItem(item_name="A", maker="三洋", quantity=2, unit_price=1000, line_id="L1"),
            StatementItem(item_name="B", quantity=1, unit_price=500, is_taxable=False),
        ],
        todos=[todo("application_sent", "done"), todo("application_approved", "open")],
        status="PAYMENT_REQUIRED",
        contract_date=date(2024, 4, 2),
        tax_rate=Decimal("0.05"),
        insurance_fee=3000,
        category="slot",
    )
    trade_repo.add(trade)

    loaded = trade_repo.find_by_id("T-1")
    assert loaded is not None
    assert [i.item_name for i in loaded.items] == ["A", "B"]
    assert loaded.items[1].is_taxable is False
    assert loaded.todos == trade.todos
    assert loaded.tax_rate == Decimal("0.05")
    assert loaded.contract_date == date(2024, 4, 2)
    assert loaded.created_at == datetime(2024, 4, 1, 9, 0)
    assert loaded.seller_id == SELLER_ID
    assert loaded.buyer.company_name == "バイヤー遊技"


def test_missing_trade_returns_none(trade_repo):
    assert trade_repo.find_by_id("nope") is None


def test_duplicate_add_raises(trade_repo):
    trade_repo.add(make_trade("T-1"))
    with pytest.raises(ValueError):
        trade_repo.add(make_trade("T-1"))


def test_list_for_user_uses_resolved_ids(trade_repo):
    trade_repo.add(make_trade("T-1", created_at=datetime(2024, 4, 1)))
    trade_repo.add(make_trade("T-2", created_at=datetime(2024, 4, 5)))
    other = make_trade("T-3")
    other.seller = CompanyProfile(user_id="u-other", company_name="他社")
    other.buyer = CompanyProfile(user_id="u-third", company_name="第三者")
    trade_repo.add(other)

    assert [t.id for t in trade_repo.list_for_user(BUYER_ID)] == ["T-2", "T-1"]
    assert [t.id for t in trade_repo.list_for_user("u-other")] == ["T-3"]
    assert len(trade_repo.list_all()) == 3


def test_save_overwrites_children(trade_repo):
    trade = make_trade("T-1", todos=[todo("application_sent", "open")])
    trade_repo.add(trade)

    trade.todos = [todo("application_sent", "done"), todo("application_approved", "open")]
    trade.items = [StatementItem(item_name="C", quantity=1, unit_price=1)]
    trade.status = "PAYMENT_REQUIRED"
    trade_repo.save(trade)

    loaded = trade_repo.find_by_id("T-1")
    assert loaded.status == "PAYMENT_REQUIRED"
    assert [t.kind for t in loaded.todos] == ["application_sent", "application_approved"]
    assert [i.item_name for i in loaded.items] == ["C"]


def test_save_missing_trade_raises(trade_repo):
    with pytest.raises(ValueError):
        trade_repo.save(make_trade("ghost"))


def test_invoice_repo_roundtrip(invoice_repo):
    invoice = SalesInvoice(
        invoice_id="INV-1",
        invoice_type="hall",
        created_at=datetime(2024, 4, 1, 10, 0),
        issued_date=date(2024, 4, 1),
        items=[
            InvoiceItem(maker="三洋", product_name="P大海物語5", quantity=5, unit_price=120000),
            InvoiceItem(product_name="部品", amount=3000),
        ],
        tax=30000,
    )
    invoice_repo.add(invoice)
    invoice_repo.add(
        SalesInvoice(invoice_id="INV-2", invoice_type="vendor", created_at=datetime(2024, 4, 2))
    )

    loaded = invoice_repo.get("INV-1")
    assert loaded is not None
    assert [i.product_name for i in loaded.items] == ["P大海物語5", "部品"]
    assert loaded.tax == 30000
    assert loaded.subtotal is None
    assert [i.invoice_id for i in invoice_repo.list_all()] == ["INV-2", "INV-1"]
    assert [i.invoice_id for i in invoice_repo.list_all("hall")] == ["INV-1"]
    with pytest.raises(ValueError):
        invoice_repo.add(invoice)


def test_schema_version_recorded(db_helper):
    row = db_helper.get_connection().execute(
        "SELECT value FROM meta WHERE key = 'schema_version'"
    ).fetchone()
    assert int(row["value"]) == SCHEMA_VERSION


def test_old_schema_version_is_rejected(tmp_path):
    path = tmp_path / "old.db"
    helper = DbHelper(str(path))
    helper.init_schema_if_needed()
    with helper.get_connection() as conn:
        conn.execute("UPDATE meta SET value = '1' WHERE key = 'schema_version'")
    helper.close()

    reopened = DbHelper(str(path))
    with pytest.raises(RuntimeError):
        reopened.init_schema_if_needed()
    reopened.close()
