import logging
from typing import List, Optional, Tuple

from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import OrderStatus
from app.models.generated_image import GeneratedImage, ImageStatus
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.schemas.orders_schemas import CheckoutRequest, CustomOrderRequest

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    status_code = 400


class ImageNotFoundError(CheckoutError):
    status_code = 404


def get_order_items(session: Session, order_id: str) -> List[OrderItem]:
    return session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id)
    ).all()


def order_to_dict(order: Order, items: Optional[List[OrderItem]] = None) -> dict:
    data = {
        "id": order.id,
        "user_id": order.user_id,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "delivery_address": order.delivery_address,
        "shipping_address": order.shipping_address,
        "total_amount": order.total_amount,
        "estimated_price": order.estimated_price,
        "final_price": order.final_price,
        "is_price_overridden": order.is_price_overridden,
        "status": order.status,
        "payment_method": order.payment_method,
        "notes": order.notes,
        "generated_image_id": order.generated_image_id,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
    if items is not None:
        data["order_items"] = [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product_name,
                "product_price": i.product_price,
                "quantity": i.quantity,
                "subtotal": i.subtotal,
            }
            for i in items
        ]
    return data


def image_status_mismatch(order: Order, image: Optional[GeneratedImage]) -> bool:
    """Display-only warning: an approved image on a cancelled order, or a rejected one on a live order."""
    if image is None:
        return False
    cancelled = order.status == OrderStatus.cancelled.value
    return (
        (image.status == ImageStatus.approved.value and cancelled)
        or (image.status == ImageStatus.rejected.value and not cancelled)
    )


def place_order(
    session: Session,
    data: CheckoutRequest,
    user_id: Optional[str] = None,
) -> Tuple[Order, List[OrderItem]]:
    """
    Create a pending order from catalog prices plus the delivery fee.

    The order and its items are written in two commits; if the items fail the
    order row stays behind without them.
    """
    lines = []
    for item in data.items:
        product = session.get(Product, item.product_id)
        if not product or not product.is_active:
            raise CheckoutError(f"Product {item.product_id} not found")
        lines.append((product, item.quantity))

    subtotal = sum(product.price * quantity for product, quantity in lines)
    total = round(subtotal + settings.delivery_fee, 2)

    order = Order(
        user_id=user_id,
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        delivery_address=data.delivery_address,
        notes=data.special_instructions,
        total_amount=total,
        status=OrderStatus.pending.value,
    )
    session.add(order)
    session.commit()
    session.refresh(order)

    items = [
        OrderItem(
            order_id=order.id,
            product_id=product.id,
            product_name=product.name,
            product_price=product.price,
            quantity=quantity,
            price=product.price,
            subtotal=round(product.price * quantity, 2),
        )
        for product, quantity in lines
    ]
    session.add_all(items)
    session.commit()

    logger.info(f"Order {order.id} placed with {len(items)} items, total {total}")
    return order, items


def place_custom_order(
    session: Session,
    data: CustomOrderRequest,
    user_id: Optional[str] = None,
) -> Order:
    """Order a chat-generated arrangement; an admin prices it before it can be confirmed."""
    image = session.get(GeneratedImage, data.generated_image_id)
    if not image:
        raise ImageNotFoundError("Generated image not found")

    order = Order(
        user_id=user_id,
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        delivery_address=data.delivery_address,
        notes=data.notes,
        estimated_price=data.estimated_price,
        total_amount=data.estimated_price or 0,
        generated_image_id=image.id,
        status=OrderStatus.waiting_admin_confirmation.value,
    )
    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Custom order {order.id} created for image {image.id}")
    return order
