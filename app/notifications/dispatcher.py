import logging

from sqlmodel import Session

from app.constants.order_status import status_label
from app.models.order import Order
from app.notifications.events import OrderEvent
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "order_status"


def dispatch_order_event(
    *,
    event: OrderEvent,
    order: Order,
    session: Session,
) -> bool:
    """
    Write the in-app notification for an order's owner after a status mutation.

    Best effort: the order update is already committed, so a failure here is
    logged and rolled back but never raised. Orders without a user are skipped.
    """
    if not order.user_id:
        return False

    try:
        create_notification(
            session=session,
            user_id=order.user_id,
            type=NOTIFICATION_TYPE,
            title="Order Status Updated",
            message=f"Your order status has been updated to {status_label(order.status)}",
            meta={
                "order_id": order.id,
                "status": order.status,
                "event": event.value,
            },
        )
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Notification for order {order.id} failed")
        return False

    return True
