from __future__ import annotations

from datetime import date, datetime

import pytest
from conftest import BUYER_ID, SELLER_ID, make_trade

from tradenavi.core.models import InvoiceItem, SalesInvoice
from tradenavi.core.rules.trade_rows import RowFilter
from tradenavi.flows.invoice import get_invoice_totals, list_invoices
from tradenavi.flows.trade import (
    advance_trade,
    cancel_trade,
    get_trade,
    list_trade_rows,
    load_trades_for_user,
    present_trade,
)

NOW = datetime(2024, 4, 10, 12, 0)


def test_get_trade_unknown_raises(trade_repo):
    with pytest.raises(ValueError):
        get_trade(trade_id="missing", trade_repo=trade_repo)


def test_advance_persists_each_step(trade_repo):
    trade_repo.add(make_trade("T-1"))

    advance_trade(
        trade_id="T-1", completed_kind="application_sent", actor_user_id=BUYER_ID, now=NOW, trade_repo=trade_repo
    )
    stored = trade_repo.find_by_id("T-1")
    assert stored.status == "PAYMENT_REQUIRED"
    assert stored.contract_date == date(2024, 4, 10)

    advance_trade(
        trade_id="T-1",
        completed_kind="application_approved",
        actor_user_id=BUYER_ID,
        now=NOW,
        trade_repo=trade_repo,
    )
    advance_trade(
        trade_id="T-1",
        completed_kind="payment_confirmed",
        actor_user_id=BUYER_ID,
        now=NOW,
        trade_repo=trade_repo,
    )
    stored = trade_repo.find_by_id("T-1")
    assert stored.status == "COMPLETED"
    assert stored.payment_amount == 1_408_000
    assert stored.completed_at == NOW


def test_advance_rejects_out_of_order_and_wrong_actor(trade_repo):
    trade_repo.add(make_trade("T-1"))
    with pytest.raises(ValueError):
        advance_trade(
            trade_id="T-1",
            completed_kind="application_approved",
            actor_user_id=BUYER_ID,
            trade_repo=trade_repo,
        )
    with pytest.raises(ValueError):
        advance_trade(
            trade_id="T-1",
            completed_kind="application_sent",
            actor_user_id=SELLER_ID,
            trade_repo=trade_repo,
        )
    assert trade_repo.find_by_id("T-1").contract_date is None


def test_cancel_trade(trade_repo):
    trade_repo.add(make_trade("T-1"))
    canceled = cancel_trade(trade_id="T-1", actor_user_id=SELLER_ID, now=NOW, trade_repo=trade_repo)
    assert canceled.status == "CANCELED"
    assert trade_repo.find_by_id("T-1").canceled_at == NOW

    with pytest.raises(ValueError):
        cancel_trade(trade_id="T-1", actor_user_id=SELLER_ID, trade_repo=trade_repo)
    with pytest.raises(ValueError):
        advance_trade(
            trade_id="T-1",
            completed_kind="application_sent",
            actor_user_id=BUYER_ID,
            trade_repo=trade_repo,
        )


def test_cancel_by_outsider_rejected(trade_repo):
    trade_repo.add(make_trade("T-1"))
    with pytest.raises(ValueError):
        cancel_trade(trade_id="T-1", actor_user_id="outsider", trade_repo=trade_repo)


def test_present_trade(trade_repo):
    trade_repo.add(make_trade("T-1"))
    buyer_view = present_trade(trade_id="T-1", viewer_user_id=BUYER_ID, trade_repo=trade_repo)
    assert buyer_view.primary_action is not None
    seller_view = present_trade(trade_id="T-1", viewer_user_id=SELLER_ID, trade_repo=trade_repo)
    assert seller_view.primary_action is None
    with pytest.raises(ValueError):
        present_trade(trade_id="T-1", viewer_user_id="outsider", trade_repo=trade_repo)


def test_list_trade_rows_filters_and_sorts(trade_repo):
    trade_repo.add(make_trade("T-1", category="pachinko", total_amount=300))
    trade_repo.add(make_trade("T-2", category="slot", total_amount=100))
    trade_repo.add(make_trade("T-3", category="slot", status="COMPLETED", total_amount=200))

    assert len(load_trades_for_user(user_id=BUYER_ID, trade_repo=trade_repo)) == 3

    rows = list_trade_rows(
        user_id=BUYER_ID,
        row_filter=RowFilter(categories=frozenset({"slot"})),
        sort_key="amount",
        direction="desc",
        trade_repo=trade_repo,
    )
    assert [r.id for r in rows] == ["T-3", "T-2"]

    in_progress = list_trade_rows(
        user_id=BUYER_ID,
        row_filter=RowFilter(status="in_progress"),
        sort_key="amount",
        trade_repo=trade_repo,
    )
    assert [r.id for r in in_progress] == ["T-2", "T-1"]


def test_invoice_flows(invoice_repo):
    invoice_repo.add(
        SalesInvoice(
            invoice_id="INV-1",
            invoice_type="vendor",
            created_at=datetime(2024, 4, 1),
            items=[InvoiceItem(quantity=10, unit_price=128000)],
        )
    )
    invoice, totals = get_invoice_totals(invoice_id="INV-1", invoice_repo=invoice_repo)
    assert invoice.invoice_id == "INV-1"
    assert totals.total == 1_408_000
    assert [i.invoice_id for i in list_invoices(invoice_type="vendor", invoice_repo=invoice_repo)] == ["INV-1"]
    assert list_invoices(invoice_type="hall", invoice_repo=invoice_repo) == []
    with pytest.raises(ValueError):
        get_invoice_totals(invoice_id="missing", invoice_repo=invoice_repo)
