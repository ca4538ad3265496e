import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from app.database import get_session
from app.dependencies.session_context import SessionContext, get_optional_session_context
from app.schemas.orders_schemas import CheckoutRequest
from app.services.order_service import CheckoutError, order_to_dict, place_order

logger = logging.getLogger(__name__)

router = APIRouter()


#Order Confirmation Page

@router.post("/orders", status_code=201)
def create_order(
    data: CheckoutRequest,
    session: Session = Depends(get_session),
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
):
    try:
        order, items = place_order(session, data, user_id=ctx.user_id if ctx else None)
    except CheckoutError as e:
        raise HTTPException(e.status_code, str(e))
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Placing order failed")
        raise HTTPException(500, "There was an error placing your order")

    return {
        "message": f"Order #{order.id[:8]} has been created. We'll contact you soon!",
        "order": order_to_dict(order, items),
    }
