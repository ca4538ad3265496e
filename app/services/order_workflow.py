import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Session

from app.constants.order_status import ALLOWED_TRANSITIONS, VALID_STATUSES, OrderStatus
from app.models.order import Order
from app.notifications import OrderEvent, dispatch_order_event

logger = logging.getLogger(__name__)


class OrderWorkflowError(Exception):
    status_code = 400


class OrderNotFoundError(OrderWorkflowError):
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__("Order not found")
        self.order_id = order_id


class InvalidStatusError(OrderWorkflowError):
    def __init__(self, status: str):
        super().__init__("Invalid status value")
        self.status = status


class InvalidTransitionError(OrderWorkflowError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Invalid status transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class FinalPriceRequiredError(OrderWorkflowError):
    def __init__(self):
        super().__init__("Cannot confirm order without final price")


class InvalidPriceError(OrderWorkflowError):
    def __init__(self):
        super().__init__("Price must be greater than zero")


def has_final_price(order: Order) -> bool:
    return order.final_price is not None and order.final_price > 0


def validate_transition(current: Optional[str], requested: str) -> None:
    if requested not in VALID_STATUSES:
        raise InvalidStatusError(requested)

    # unknown stored statuses have no outgoing edges
    if requested not in ALLOWED_TRANSITIONS.get(current, []):
        raise InvalidTransitionError(current, requested)


def load_order(session: Session, order_id: str) -> Order:
    # always read the stored row, never a stale identity-map copy
    order = session.get(Order, order_id, populate_existing=True)
    if not order:
        raise OrderNotFoundError(order_id)
    return order


def change_order_status(
    session: Session,
    order_id: str,
    new_status: Optional[str] = None,
    updates: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Apply a guarded status change and/or descriptive field updates to an order.

    The transition table and the final price precondition are checked against
    the stored order. Cancelling clears the final price in the same update.
    Returns the dict of fields written.
    """
    if new_status is not None and new_status not in VALID_STATUSES:
        raise InvalidStatusError(new_status)

    order = load_order(session, order_id)
    update_data: Dict[str, Any] = {}

    if new_status is not None:
        validate_transition(order.status, new_status)

        if new_status == OrderStatus.confirmed.value and not has_final_price(order):
            raise FinalPriceRequiredError()

        update_data["status"] = new_status
        if new_status == OrderStatus.cancelled.value:
            update_data["final_price"] = None

    if updates:
        update_data.update(updates)

    old_status = order.status
    for field, value in update_data.items():
        setattr(order, field, value)
    order.updated_at = datetime.utcnow()

    session.add(order)
    session.commit()
    session.refresh(order)

    if new_status is not None:
        logger.info(f"Order {order.id} status {old_status} -> {new_status}")
        dispatch_order_event(event=OrderEvent.STATUS_CHANGED, order=order, session=session)

    return update_data


def set_final_price(session: Session, order_id: str, price: float) -> Order:
    """
    Attach an agreed price to an order and put it back into
    waiting_admin_confirmation, whatever its current status.
    """
    # NaN and infinity fail every comparison a price check relies on
    if price is None or not math.isfinite(price) or price <= 0:
        raise InvalidPriceError()

    order = load_order(session, order_id)

    order.total_amount = price
    order.final_price = price
    order.is_price_overridden = True
    order.status = OrderStatus.waiting_admin_confirmation.value
    order.updated_at = datetime.utcnow()

    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.id} priced at {price}")
    dispatch_order_event(event=OrderEvent.PRICE_SET, order=order, session=session)

    return order


def confirm_paid_order(session: Session, order_id: str, amount_paid: float) -> Optional[Order]:
    """
    Confirm an order after the payment processor reports it paid.

    The paid amount becomes the final price so confirmed orders always carry
    one. Already confirmed orders are returned untouched; completed and
    cancelled orders are left alone.
    """
    order = session.get(Order, order_id, populate_existing=True)
    if not order:
        logger.warning(f"Paid checkout references unknown order {order_id}")
        return None

    if order.status == OrderStatus.confirmed.value:
        return order

    if not amount_paid or amount_paid <= 0:
        logger.warning(f"Paid checkout for order {order.id} reported no amount")
        return None

    if OrderStatus.confirmed.value not in ALLOWED_TRANSITIONS.get(order.status, []):
        logger.warning(f"Paid checkout for order {order.id} in status {order.status} ignored")
        return None

    order.final_price = amount_paid
    order.price_locked = True
    order.status = OrderStatus.confirmed.value
    order.updated_at = datetime.utcnow()

    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.id} confirmed by payment of {amount_paid}")
    dispatch_order_event(event=OrderEvent.PAYMENT_CONFIRMED, order=order, session=session)

    return order
