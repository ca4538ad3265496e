import pytest
from sqlmodel import Session, select

from app.constants.order_status import ALLOWED_TRANSITIONS, VALID_STATUSES, status_label
from app.models.order import Order
from app.models.notifications import Notification
from app.notifications import dispatcher
from app.services.order_workflow import (
    FinalPriceRequiredError,
    InvalidPriceError,
    InvalidStatusError,
    InvalidTransitionError,
    OrderNotFoundError,
    change_order_status,
    confirm_paid_order,
    set_final_price,
)


def notifications_for(session, user):
    return session.exec(select(Notification).where(Notification.user_id == user.id)).all()


# ---------------------------------------------------------------------------
# Transition guard
# ---------------------------------------------------------------------------

DISALLOWED = [
    (current, target)
    for current in VALID_STATUSES
    for target in VALID_STATUSES
    if target not in ALLOWED_TRANSITIONS[current]
]


@pytest.mark.parametrize("current,target", DISALLOWED)
def test_transition_outside_table_is_rejected(session, make_order, current, target):
    order = make_order(status=current, final_price=120.0 if current != "cancelled" else None)

    with pytest.raises(InvalidTransitionError) as exc:
        change_order_status(session, order.id, new_status=target)

    assert str(exc.value) == f"Invalid status transition from {current} to {target}"
    session.refresh(order)
    assert order.status == current


@pytest.mark.parametrize("target", ["pending", "waiting_admin_confirmation", "confirmed", "cancelled"])
def test_completed_is_terminal(session, make_order, target):
    order = make_order(status="completed", final_price=120.0)

    with pytest.raises(InvalidTransitionError):
        change_order_status(session, order.id, new_status=target)

    session.refresh(order)
    assert order.status == "completed"


def test_unknown_status_value_is_rejected(session, make_order):
    order = make_order()

    with pytest.raises(InvalidStatusError):
        change_order_status(session, order.id, new_status="shipped")

    session.refresh(order)
    assert order.status == "pending"


def test_unknown_stored_status_has_no_outgoing_transitions(session, make_order):
    order = make_order(status="on_hold")

    with pytest.raises(InvalidTransitionError):
        change_order_status(session, order.id, new_status="cancelled")


def test_missing_order(session):
    with pytest.raises(OrderNotFoundError) as exc:
        change_order_status(session, "does-not-exist", new_status="cancelled")

    assert exc.value.status_code == 404


def test_confirm_without_final_price_fails(session, make_order):
    order = make_order(status="pending")

    with pytest.raises(FinalPriceRequiredError) as exc:
        change_order_status(session, order.id, new_status="confirmed")

    assert str(exc.value) == "Cannot confirm order without final price"
    session.refresh(order)
    assert order.status == "pending"


def test_confirm_with_zero_final_price_fails(session, make_order):
    order = make_order(status="waiting_admin_confirmation", final_price=0.0)

    with pytest.raises(FinalPriceRequiredError):
        change_order_status(session, order.id, new_status="confirmed")


@pytest.mark.parametrize("current", ["pending", "waiting_admin_confirmation", "confirmed"])
def test_cancel_clears_final_price(session, make_order, current):
    order = make_order(status=current, final_price=120.0)

    updated = change_order_status(session, order.id, new_status="cancelled")

    assert updated == {"status": "cancelled", "final_price": None}
    session.refresh(order)
    assert order.status == "cancelled"
    assert order.final_price is None


def test_cancelled_order_can_be_reopened(session, make_order):
    order = make_order(status="cancelled")

    change_order_status(session, order.id, new_status="pending")

    session.refresh(order)
    assert order.status == "pending"


def test_descriptive_updates_without_status(session, make_order, customer):
    order = make_order(user=customer)

    updated = change_order_status(session, order.id, updates={"notes": "Leave at the door"})

    assert updated == {"notes": "Leave at the door"}
    session.refresh(order)
    assert order.notes == "Leave at the door"
    assert order.status == "pending"
    assert notifications_for(session, customer) == []


# ---------------------------------------------------------------------------
# Price confirmation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("price", [0, -5, -0.01])
def test_non_positive_price_is_rejected(session, make_order, price):
    order = make_order(status="pending", total_amount=80.0)

    with pytest.raises(InvalidPriceError):
        set_final_price(session, order.id, price)

    session.refresh(order)
    assert order.status == "pending"
    assert order.total_amount == 80.0
    assert order.final_price is None


@pytest.mark.parametrize("current", ["pending", "confirmed", "completed", "cancelled"])
def test_price_moves_any_order_to_waiting_confirmation(session, make_order, current):
    order = make_order(status=current)

    set_final_price(session, order.id, 120)

    session.refresh(order)
    assert order.status == "waiting_admin_confirmation"
    assert order.final_price == 120
    assert order.total_amount == 120
    assert order.is_price_overridden is True


def test_price_then_confirm(session, make_order, customer):
    order = make_order(status="pending", user=customer)

    set_final_price(session, order.id, 120)
    change_order_status(session, order.id, new_status="confirmed")

    session.refresh(order)
    assert order.status == "confirmed"
    assert order.final_price == 120

    messages = [n.message for n in notifications_for(session, customer)]
    assert "Your order status has been updated to waiting admin confirmation" in messages
    assert "Your order status has been updated to confirmed" in messages


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

def test_status_change_notifies_owner(session, make_order, customer):
    order = make_order(status="confirmed", final_price=120.0, user=customer)

    change_order_status(session, order.id, new_status="cancelled")

    [notification] = notifications_for(session, customer)
    assert notification.type == "order_status"
    assert notification.title == "Order Status Updated"
    assert notification.message == "Your order status has been updated to cancelled"
    assert notification.meta["order_id"] == order.id
    assert notification.meta["status"] == "cancelled"
    assert notification.is_read is False


def test_guest_order_gets_no_notification(session, make_order):
    order = make_order(status="pending")

    change_order_status(session, order.id, new_status="cancelled")

    assert session.exec(select(Notification)).all() == []


def test_notification_failure_does_not_fail_status_change(session, make_order, customer, monkeypatch):
    order = make_order(status="pending", user=customer)

    def broken(**kwargs):
        raise RuntimeError("notifications table is gone")

    monkeypatch.setattr(dispatcher, "create_notification", broken)

    change_order_status(session, order.id, new_status="cancelled")

    session.refresh(order)
    assert order.status == "cancelled"
    assert notifications_for(session, customer) == []


def test_status_label():
    assert status_label("waiting_admin_confirmation") == "waiting admin confirmation"
    assert status_label("pending") == "pending"


# ---------------------------------------------------------------------------
# Payment confirmation
# ---------------------------------------------------------------------------

def test_paid_order_is_confirmed_with_paid_amount(session, make_order, customer):
    order = make_order(status="pending", total_amount=54.99, user=customer)

    confirm_paid_order(session, order.id, 54.99)

    session.refresh(order)
    assert order.status == "confirmed"
    assert order.final_price == 54.99
    assert order.price_locked is True
    [notification] = notifications_for(session, customer)
    assert notification.meta["event"] == "payment_confirmed"


def test_repeated_payment_confirmation_is_idempotent(session, make_order, customer):
    order = make_order(status="pending", user=customer)

    confirm_paid_order(session, order.id, 99.0)
    confirm_paid_order(session, order.id, 99.0)

    assert len(notifications_for(session, customer)) == 1


@pytest.mark.parametrize("current", ["completed", "cancelled"])
def test_payment_does_not_revive_closed_orders(session, make_order, current):
    order = make_order(status=current)

    assert confirm_paid_order(session, order.id, 99.0) is None

    session.refresh(order)
    assert order.status == current


def test_payment_for_unknown_order_is_ignored(session):
    assert confirm_paid_order(session, "missing", 10.0) is None


@pytest.mark.parametrize("price", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_price_is_rejected(session, make_order, price):
    order = make_order(status="pending", total_amount=80.0)

    with pytest.raises(InvalidPriceError):
        set_final_price(session, order.id, price)

    session.refresh(order)
    assert order.status == "pending"
    assert order.total_amount == 80.0
    assert order.final_price is None


def test_confirm_checks_price_stored_at_transition_time(engine, session, make_order):
    order = make_order(status="waiting_admin_confirmation", final_price=120.0)
    assert order.final_price == 120.0

    # another request clears the price after this session loaded the order
    with Session(engine) as other:
        stored = other.get(Order, order.id)
        stored.final_price = None
        other.add(stored)
        other.commit()

    with pytest.raises(FinalPriceRequiredError):
        change_order_status(session, order.id, new_status="confirmed")

    session.refresh(order)
    assert order.status == "waiting_admin_confirmation"
