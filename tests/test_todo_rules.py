from __future__ import annotations

from datetime import date, datetime

from conftest import BUYER_ID, SELLER_ID, make_trade, todo

from tradenavi.core.rules.todo import (
    advance_trade_todo,
    build_todos_from_status,
    cancel_trade_record,
    classify_trade,
    complete_todo,
    derive_trade_status,
    ensure_trade_todos,
    get_actor_role,
    get_open_todo,
    resolve_current_todo_kind,
)

NOW = datetime(2024, 4, 10, 15, 30)


def test_empty_trade_starts_at_application_sent():
    result = classify_trade(make_trade())
    assert result.todo_kind == "application_sent"
    assert result.section == "approval"
    assert result.bucket == "approval"
    assert result.active_todo is True
    assert result.assignee == "buyer"


def test_contract_date_satisfies_application_sent():
    trade = make_trade(contract_date=date(2024, 4, 2))
    assert resolve_current_todo_kind(trade) == "application_approved"
    assert classify_trade(trade).bucket == "in_progress"


def test_payment_date_moves_to_confirmation():
    trade = make_trade(contract_date=date(2024, 4, 2), payment_date=date(2024, 4, 5))
    result = classify_trade(trade)
    assert result.todo_kind == "payment_confirmed"
    assert result.section == "confirmation"
    assert result.bucket == "in_progress"


def test_all_checkpoints_satisfied_is_completed():
    trade = make_trade(
        contract_date=date(2024, 4, 2),
        payment_date=date(2024, 4, 5),
        completed_at=datetime(2024, 4, 9, 10, 0),
    )
    result = classify_trade(trade)
    assert result.todo_kind == "trade_completed"
    assert result.active_todo is False
    assert result.bucket == "completed"


def test_payment_and_shipment_dates_complete_the_trade():
    trade = make_trade(
        contract_date=date(2024, 4, 2),
        shipment_date=date(2024, 4, 6),
        document_sent_date=date(2024, 4, 3),
        payment_date=date(2024, 4, 5),
    )
    result = classify_trade(trade, "seller")
    assert result.todo_kind == "trade_completed"
    assert result.bucket == "completed"
    assert result.active_todo is False
    assert derive_trade_status(trade) == "COMPLETED"


def test_shipment_date_alone_does_not_complete():
    trade = make_trade(contract_date=date(2024, 4, 2), shipment_date=date(2024, 4, 6))
    assert resolve_current_todo_kind(trade) == "application_approved"


def test_contract_only_waits_on_buyer_payment_for_seller():
    result = classify_trade(make_trade(contract_date=date(2024, 4, 2)), "seller")
    assert result.todo_kind == "application_approved"
    assert result.section == "payment"
    assert result.bucket == "in_progress"
    assert result.active_todo is True
    assert result.actionable is False


def test_classification_is_repeatable():
    trade = make_trade(
        contract_date=date(2024, 4, 2),
        todos=[todo("application_sent", "done"), todo("application_approved", "open")],
    )
    assert classify_trade(trade, "buyer") == classify_trade(trade, "buyer")
    assert classify_trade(trade, "seller") == classify_trade(trade, "seller")


def test_done_todos_satisfy_checkpoints():
    trade = make_trade(
        todos=[
            todo("application_sent", "done"),
            todo("application_approved", "done"),
            todo("payment_confirmed", "open"),
        ]
    )
    assert resolve_current_todo_kind(trade) == "payment_confirmed"


def test_earlier_checkpoint_wins_on_contradictory_data():
    # 入金日已写入但成约未满足：仍停在 application_sent
    trade = make_trade(payment_date=date(2024, 4, 5))
    assert resolve_current_todo_kind(trade) == "application_sent"


def test_stored_status_counts_as_progress():
    assert resolve_current_todo_kind(make_trade(status="APPROVED")) == "application_approved"
    assert resolve_current_todo_kind(make_trade(status="CONFIRM_REQUIRED")) == "payment_confirmed"
    assert resolve_current_todo_kind(make_trade(status="COMPLETED")) == "trade_completed"
    assert resolve_current_todo_kind(make_trade(status="DRAFT")) == "application_sent"


def test_cancel_signals_take_priority():
    done = dict(
        contract_date=date(2024, 4, 2),
        payment_date=date(2024, 4, 5),
        completed_at=datetime(2024, 4, 9),
    )
    assert resolve_current_todo_kind(make_trade(canceled_at=datetime(2024, 4, 3), **done)) == "trade_canceled"
    assert resolve_current_todo_kind(make_trade(status="CANCELED")) == "trade_canceled"
    assert (
        resolve_current_todo_kind(make_trade(todos=[todo("trade_canceled", "done")])) == "trade_canceled"
    )
    result = classify_trade(make_trade(status="CANCELED"))
    assert result.bucket == "canceled"
    assert result.active_todo is False


def test_actionable_only_for_assignee():
    trade = make_trade()
    assert classify_trade(trade, "buyer").actionable is True
    assert classify_trade(trade, "seller").actionable is False
    assert classify_trade(trade).actionable is False


def test_classify_does_not_mutate_input():
    todos = [todo("application_sent", "open")]
    trade = make_trade(todos=todos)
    classify_trade(trade, "buyer")
    ensure_trade_todos(trade)
    assert trade.todos == [todo("application_sent", "open")]
    assert trade.status is None


def test_get_actor_role():
    trade = make_trade()
    assert get_actor_role(trade, BUYER_ID) == "buyer"
    assert get_actor_role(trade, SELLER_ID) == "seller"
    assert get_actor_role(trade, "someone-else") == "none"
    assert get_actor_role(trade, None) == "none"


def test_denormalized_ids_take_precedence():
    trade = make_trade(buyer_user_id="u-buyer-2")
    assert get_actor_role(trade, "u-buyer-2") == "buyer"
    assert get_actor_role(trade, BUYER_ID) == "none"


def test_complete_todo_appends_next_step():
    todos = complete_todo([todo("application_sent", "open")], "application_sent")
    assert todos == [todo("application_sent", "done"), todo("application_approved", "open")]
    assert get_open_todo(todos) == todo("application_approved", "open")


def test_build_todos_from_status():
    assert build_todos_from_status("PAYMENT_REQUIRED") == [
        todo("application_sent", "done"),
        todo("application_approved", "open"),
    ]
    assert build_todos_from_status(None) == [todo("application_sent", "open")]
    assert [t.kind for t in build_todos_from_status("COMPLETED")] == [
        "application_sent",
        "application_approved",
        "payment_confirmed",
        "trade_completed",
    ]
    assert build_todos_from_status("CANCELED") == [todo("trade_canceled", "done")]


def test_derive_trade_status():
    assert derive_trade_status(make_trade()) == "APPROVAL_REQUIRED"
    assert derive_trade_status(make_trade(contract_date=date(2024, 4, 2))) == "PAYMENT_REQUIRED"
    assert derive_trade_status(make_trade(status="CANCELED")) == "CANCELED"


def test_advance_full_lifecycle():
    trade = make_trade()

    approved = advance_trade_todo(trade, "application_sent", BUYER_ID, NOW)
    assert approved is not None
    assert approved.contract_date == date(2024, 4, 10)
    assert approved.status == "PAYMENT_REQUIRED"
    assert resolve_current_todo_kind(approved) == "application_approved"

    paid = advance_trade_todo(approved, "application_approved", BUYER_ID, NOW)
    assert paid is not None
    assert paid.payment_date == date(2024, 4, 10)
    assert paid.payment_amount == 1_408_000
    assert paid.payment_method == "振込"
    assert paid.status == "CONFIRM_REQUIRED"

    done = advance_trade_todo(paid, "payment_confirmed", BUYER_ID, NOW)
    assert done is not None
    assert done.completed_at == NOW
    assert done.status == "COMPLETED"
    assert classify_trade(done).bucket == "completed"

    # 原对象不变
    assert trade.contract_date is None
    assert trade.todos == []


def test_advance_appends_next_todo():
    trade = make_trade(todos=[todo("application_sent", "open")], status="APPROVAL_REQUIRED")
    updated = advance_trade_todo(trade, "application_sent", BUYER_ID, NOW)
    assert updated is not None
    assert updated.todos[-1] == todo("application_approved", "open")


def test_advance_rejects_wrong_kind_or_actor():
    trade = make_trade()
    assert advance_trade_todo(trade, "application_approved", BUYER_ID, NOW) is None
    assert advance_trade_todo(trade, "application_sent", SELLER_ID, NOW) is None
    assert advance_trade_todo(trade, "application_sent", "outsider", NOW) is None


def test_advance_rejects_terminal_trades():
    canceled = make_trade(status="CANCELED")
    assert advance_trade_todo(canceled, "trade_canceled", BUYER_ID, NOW) is None
    completed = make_trade(status="COMPLETED")
    assert advance_trade_todo(completed, "trade_completed", BUYER_ID, NOW) is None


def test_advance_closes_stale_earlier_todos():
    # 成约日已写入但 application_sent 待办仍为 open
    trade = make_trade(
        contract_date=date(2024, 4, 2),
        todos=[todo("application_sent", "open")],
    )
    updated = advance_trade_todo(trade, "application_approved", BUYER_ID, NOW)
    assert updated is not None
    assert all(t.status == "done" for t in updated.todos if t.kind != "payment_confirmed")
    assert get_open_todo(updated.todos) == todo("payment_confirmed", "open")
    assert todo("application_approved", "done") in updated.todos


def test_cancel_trade_record():
    trade = make_trade(todos=[todo("application_sent", "done"), todo("application_approved", "open")])
    canceled = cancel_trade_record(trade, NOW)
    assert canceled.status == "CANCELED"
    assert canceled.canceled_at == NOW
    assert get_open_todo(canceled.todos) is None
    assert canceled.todos[-1] == todo("trade_canceled", "done")
    assert resolve_current_todo_kind(canceled) == "trade_canceled"

    again = cancel_trade_record(canceled, datetime(2024, 5, 1))
    assert again.canceled_at == NOW
    assert sum(1 for t in again.todos if t.kind == "trade_canceled") == 1
