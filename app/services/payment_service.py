import json
import logging
from typing import Any, Dict, Optional

import razorpay
from razorpay.errors import SignatureVerificationError

from app.config import settings
from app.constants.order_status import OrderStatus
from app.models.order import Order

logger = logging.getLogger(__name__)

# Initialize Razorpay client
razorpay_client = razorpay.Client(
    auth=(settings.razorpay_key_id, settings.razorpay_key_secret)
)

PAID_EVENT = "payment_link.paid"

# orders a customer may still pay for; anything else would be charged and ignored
PAYABLE_STATUSES = (OrderStatus.pending.value, OrderStatus.waiting_admin_confirmation.value)


class PaymentError(Exception):
    status_code = 500


class WebhookSignatureError(PaymentError):
    status_code = 400


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def from_minor_units(amount: Optional[int]) -> float:
    return (amount or 0) / 100


def payable_amount(order: Order) -> float:
    return order.final_price if order.final_price else order.total_amount


def is_payable(order: Order) -> bool:
    return order.status in PAYABLE_STATUSES and (payable_amount(order) or 0) > 0


def create_checkout_session(order: Order, amount: float) -> Dict[str, Any]:
    """
    Create a hosted payment link for ``order``.

    The order id travels as ``reference_id`` and in ``notes`` so the webhook
    and the verification call can find the order without guessing.
    """
    try:
        link = razorpay_client.payment_link.create({
            "amount": to_minor_units(amount),
            "currency": settings.currency,
            "accept_partial": False,
            "reference_id": order.id,
            "description": f"{settings.store_name} order {order.id[:8]}",
            "customer": {
                "name": order.customer_name,
                "email": order.customer_email,
                "contact": order.customer_phone or "",
            },
            "notify": {"sms": False, "email": False},
            "notes": {
                "order_id": order.id,
                "delivery_address": order.delivery_address,
            },
            "callback_url": f"{settings.base_url}/payment-success",
            "callback_method": "get",
        })
    except Exception as e:
        logger.error(f"Payment link creation failed for order {order.id}: {e}")
        raise PaymentError(str(e)) from e

    logger.info(f"Payment link {link.get('id')} created for order {order.id}")
    return link


def fetch_checkout_session(session_id: str) -> Dict[str, Any]:
    try:
        return razorpay_client.payment_link.fetch(session_id)
    except Exception as e:
        logger.error(f"Payment link lookup failed for {session_id}: {e}")
        raise PaymentError(str(e)) from e


def order_id_from_link(link: Dict[str, Any]) -> Optional[str]:
    notes = link.get("notes") or {}
    return notes.get("order_id") or link.get("reference_id")


def parse_webhook(body: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """Verify the webhook signature against the raw body and return the decoded event."""
    if not signature:
        raise WebhookSignatureError("No signature provided")

    try:
        raw = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookSignatureError("Invalid webhook payload: body is not UTF-8") from e

    try:
        razorpay_client.utility.verify_webhook_signature(
            raw, signature, settings.razorpay_webhook_secret
        )
    except SignatureVerificationError as e:
        raise WebhookSignatureError(f"Webhook signature verification failed: {e}") from e

    try:
        event = json.loads(raw)
    except ValueError as e:
        raise WebhookSignatureError(f"Invalid webhook payload: {e}") from e

    if not isinstance(event, dict):
        raise WebhookSignatureError("Invalid webhook payload: expected an object")
    return event


def paid_link_entity(event: Dict[str, Any]) -> Dict[str, Any]:
    """The payment link inside a paid event; missing or null sections read as empty."""
    entity = ((event.get("payload") or {}).get("payment_link") or {}).get("entity")
    return entity if isinstance(entity, dict) else {}
