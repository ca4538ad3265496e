import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session
from app.database import get_session
from app.models.order import Order
from app.schemas.payment_schemas import CreatePaymentSession, VerifyPaymentRequest
from app.services import payment_service
from app.services.order_workflow import confirm_paid_order
from app.services.payment_service import PaymentError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-session")
def create_payment_session(
    payload: CreatePaymentSession,
    session: Session = Depends(get_session),
):
    if not payload.orderId or payload.amount is None:
        raise HTTPException(400, "orderId and amount are required")

    order = session.get(Order, payload.orderId)
    if not order:
        raise HTTPException(404, "Order not found")

    if order.status not in payment_service.PAYABLE_STATUSES:
        raise HTTPException(400, f"Order in status {order.status} cannot be paid")

    if not payment_service.is_payable(order):
        raise HTTPException(400, "Order has no price to pay yet")

    # the client only echoes the amount; the order row decides it
    expected = payment_service.payable_amount(order)
    if payment_service.to_minor_units(payload.amount) != payment_service.to_minor_units(expected):
        raise HTTPException(400, "Amount does not match order total")

    try:
        link = payment_service.create_checkout_session(order, expected)
    except PaymentError as e:
        raise HTTPException(e.status_code, str(e))

    order.payment_reference = link["id"]
    order.payment_method = "razorpay"
    session.add(order)
    session.commit()

    return {"url": link["short_url"]}


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    session: Session = Depends(get_session),
):
    body = await request.body()
    signature = request.headers.get("x-razorpay-signature")

    try:
        event = payment_service.parse_webhook(body, signature)
    except PaymentError as e:
        raise HTTPException(e.status_code, str(e))

    event_type = event.get("event")
    if event_type == payment_service.PAID_EVENT:
        link = payment_service.paid_link_entity(event)
        order_id = payment_service.order_id_from_link(link)

        if order_id:
            confirm_paid_order(
                session,
                order_id,
                payment_service.from_minor_units(link.get("amount_paid") or link.get("amount")),
            )
        else:
            logger.warning(f"Paid payment link {link.get('id')} carries no order id")
    else:
        logger.info(f"Unhandled event type: {event_type}")

    return {"received": True}


@router.post("/verify")
def verify_payment(
    payload: VerifyPaymentRequest,
    session: Session = Depends(get_session),
):
    if not payload.sessionId:
        raise HTTPException(400, "No session ID provided")

    try:
        link = payment_service.fetch_checkout_session(payload.sessionId)
    except PaymentError as e:
        raise HTTPException(e.status_code, str(e))

    payment_status = link.get("status")
    is_successful = payment_status == "paid"

    if is_successful:
        order_id = payment_service.order_id_from_link(link)
        if order_id:
            confirm_paid_order(
                session,
                order_id,
                payment_service.from_minor_units(link.get("amount_paid") or link.get("amount")),
            )

    return {
        "success": True,
        "paymentStatus": payment_status,
        "isSuccessful": is_successful,
    }
