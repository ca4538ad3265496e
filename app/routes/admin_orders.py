# -------- ADMIN ORDERS --------
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, or_, select
from app.constants.order_status import OrderStatus
from app.database import get_session
from app.dependencies.admin import require_staff
from app.dependencies.session_context import SessionContext
from app.models.generated_image import GeneratedImage
from app.models.order import Order
from app.schemas.orders_schemas import OrderPriceRequest, OrderStatusUpdateRequest
from app.services.order_service import get_order_items, image_status_mismatch, order_to_dict
from app.services.order_workflow import (
    InvalidStatusError,
    OrderWorkflowError,
    change_order_status,
    set_final_price,
)
from app.utils.pagination import paginate


router = APIRouter()


@router.get("")
def list_orders(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    status: OrderStatus | None = None,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_staff),
):
    query = select(Order)

    if search:
        query = query.where(
            or_(
                Order.customer_name.ilike(f"%{search}%"),
                Order.customer_email.ilike(f"%{search}%"),
                Order.id.ilike(f"%{search}%"),
            )
        )

    if status:
        query = query.where(Order.status == status.value)

    return paginate(
        session=session,
        query=query.order_by(Order.created_at.desc()),
        page=page,
        limit=limit,
        serializer=order_to_dict,
    )


@router.get("/{order_id}")
def order_details(
    order_id: str,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_staff),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    image = session.get(GeneratedImage, order.generated_image_id) if order.generated_image_id else None

    data = order_to_dict(order, get_order_items(session, order.id))
    data["generated_image"] = {
        "id": image.id,
        "prompt": image.prompt,
        "image_url": image.image_url,
        "status": image.status,
    } if image else None
    data["status_mismatch"] = image_status_mismatch(order, image)
    return data


@router.post("/update-status")
def update_order_status(
    payload: OrderStatusUpdateRequest,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_staff),
):
    if payload.status and payload.status not in [s.value for s in OrderStatus]:
        raise HTTPException(400, str(InvalidStatusError(payload.status)))

    updates = payload.updates.model_dump(exclude_unset=True) if payload.updates else {}

    if not payload.id or (not payload.status and not updates):
        raise HTTPException(400, "Missing id or status/updates")

    try:
        updated = change_order_status(
            session,
            payload.id,
            new_status=payload.status or None,
            updates=updates,
        )
    except OrderWorkflowError as e:
        raise HTTPException(e.status_code, str(e))

    return {"success": True, "updated": updated}


@router.post("/{order_id}/price")
def set_order_price(
    order_id: str,
    payload: OrderPriceRequest,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_staff),
):
    try:
        order = set_final_price(session, order_id, payload.price)
    except OrderWorkflowError as e:
        raise HTTPException(e.status_code, str(e))

    return {
        "success": True,
        "order_id": order.id,
        "status": order.status,
        "final_price": order.final_price,
        "total_amount": order.total_amount,
    }
