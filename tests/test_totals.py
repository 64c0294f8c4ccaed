from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from conftest import make_trade

from tradenavi.core.models import InvoiceItem, SalesInvoice, StatementItem
from tradenavi.core.rules.precision import format_yen, to_decimal
from tradenavi.core.rules.totals import (
    calculate_invoice_totals,
    calculate_totals,
    calculate_trade_totals,
    resolve_trade_total,
    tax_rate_for_invoice,
)


def test_ten_machines_at_ten_percent():
    items = [StatementItem(item_name="P大海物語5", quantity=10, unit_price=128000)]
    totals = calculate_totals(items, Decimal("0.1"))
    assert totals.subtotal == 1_280_000
    assert totals.tax == 128_000
    assert totals.total == 1_408_000


def test_tax_is_floored():
    items = [StatementItem(item_name="x", quantity=1, unit_price=999)]
    assert calculate_totals(items, Decimal("0.1")).tax == 99
    assert calculate_totals(items, Decimal("0.05")).tax == 49


def test_float_rate_does_not_lose_a_yen():
    # 0.1 的二进制近似不能让 floor 少算 1 円
    items = [StatementItem(item_name="x", quantity=1, unit_price=1000)]
    assert calculate_totals(items, 0.1).tax == 100


def test_amount_overrides_quantity_times_price():
    items = [StatementItem(item_name="x", quantity=3, unit_price=1000, amount=2500)]
    assert calculate_totals(items).subtotal == 2500


def test_invalid_values_count_as_zero():
    items = [
        StatementItem(item_name="a", quantity=None, unit_price=1000),
        StatementItem(item_name="b", quantity="abc", unit_price=1000),  # type: ignore[arg-type]
        StatementItem(item_name="c", quantity=2, unit_price="NaN"),  # type: ignore[arg-type]
        StatementItem(item_name="d", quantity=1, unit_price="1,000"),  # type: ignore[arg-type]
    ]
    totals = calculate_totals(items, Decimal("0.1"), insurance="inf", shipping=None)
    assert totals.subtotal == 1000
    assert totals.insurance == 0
    assert totals.shipping == 0
    assert totals.total == 1100


def test_non_taxable_lines_are_excluded_from_tax():
    items = [
        StatementItem(item_name="machine", quantity=1, unit_price=100000),
        StatementItem(item_name="pallet", quantity=1, unit_price=5000, is_taxable=False),
    ]
    totals = calculate_totals(items, Decimal("0.1"), insurance=3000, shipping=2000)
    assert totals.taxable_subtotal == 100000
    assert totals.subtotal == 105000
    assert totals.tax == 10000
    assert totals.total == 105000 + 10000 + 3000 + 2000


def test_empty_items():
    totals = calculate_totals([])
    assert totals.total == 0


def test_trade_totals_use_trade_rate_and_fees():
    trade = make_trade(tax_rate=Decimal("0.08"), insurance_fee=1000, shipping_fee=500)
    totals = calculate_trade_totals(trade)
    assert totals.tax == 102_400
    assert totals.total == 1_280_000 + 102_400 + 1000 + 500


def test_stored_trade_total_is_authoritative():
    trade = make_trade(total_amount=1_000_000)
    assert resolve_trade_total(trade) == 1_000_000
    assert resolve_trade_total(make_trade()) == 1_408_000


def test_invoice_tax_rates():
    assert tax_rate_for_invoice("hall") == Decimal("0.05")
    assert tax_rate_for_invoice("vendor") == Decimal("0.10")
    assert tax_rate_for_invoice("unknown") == Decimal("0.10")


def test_hall_invoice_totals():
    invoice = SalesInvoice(
        invoice_id="INV-1",
        invoice_type="hall",
        created_at=datetime(2024, 4, 1),
        items=[InvoiceItem(quantity=5, unit_price=120000)],
        insurance=2000,
    )
    totals = calculate_invoice_totals(invoice)
    assert totals.subtotal == 600_000
    assert totals.tax == 30_000
    assert totals.total == 632_000


def test_stored_invoice_values_win():
    invoice = SalesInvoice(
        invoice_id="INV-2",
        invoice_type="vendor",
        created_at=datetime(2024, 4, 1),
        items=[InvoiceItem(quantity=2, unit_price=450000)],
        subtotal=900_000,
        tax=89_999,
        total_amount=990_000,
    )
    totals = calculate_invoice_totals(invoice)
    assert totals.tax == 89_999
    assert totals.total == 990_000


def test_precision_helpers():
    assert to_decimal(True) == 0
    assert to_decimal("  ") == 0
    assert to_decimal("-Infinity") == 0
    assert format_yen(1_408_000) == "￥1,408,000"
    assert format_yen(-500) == "-￥500"


def test_tax_uses_unfloored_subtotal():
    items = [StatementItem(item_name="x", amount="12.5")]  # type: ignore[arg-type]
    totals = calculate_totals(items, Decimal("0.08"))
    assert totals.subtotal == 12
    assert totals.tax == 1
    assert totals.total == 13


def test_out_of_range_values_count_as_zero():
    items = [
        StatementItem(item_name="x", amount="1e9999999"),  # type: ignore[arg-type]
        StatementItem(item_name="y", quantity="1e999999", unit_price="1e999999"),  # type: ignore[arg-type]
        StatementItem(item_name="z", quantity=1, unit_price=1000),
    ]
    totals = calculate_totals(items, "1e9999999", insurance="1e9999999")
    assert totals.subtotal == 1000
    assert totals.tax == 100
    assert totals.insurance == 0
    assert totals.total == 1100
    assert to_decimal(Decimal("1E+18")) == 0
    assert to_decimal("9.9E+17") == Decimal("9.9E+17")
