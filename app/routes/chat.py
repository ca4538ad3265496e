# -------- FLOWER EXPERT CHAT --------
import logging
from typing import Optional
from uuid import uuid4
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.session_context import SessionContext, get_optional_session_context
from app.models.chat_history import ChatHistory
from app.models.generated_image import GeneratedImage
from app.models.training_data import TrainingData
from app.schemas.chat_schemas import ChatRequest
from app.schemas.orders_schemas import CustomOrderRequest
from app.services import chat_service, image_service
from app.services.chat_service import ChatServiceError
from app.services.image_service import ImageGenerationError
from app.services.order_service import CheckoutError, order_to_dict, place_custom_order
from app.utils.ai_formatter import format_ai_response

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
def chat(
    payload: ChatRequest,
    session: Session = Depends(get_session),
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
):
    session_id = payload.session_id or str(uuid4())
    user_id = ctx.user_id if ctx else None
    training = session.exec(select(TrainingData)).all()

    image_url = None
    generated_image_id = None

    if payload.image_mode:
        try:
            result = image_service.generate_image(
                payload.message,
                use_image_to_image=bool(payload.reference_image_uuid),
                base_image_uuid=payload.reference_image_uuid,
            )
            image_url = result["image_url"]

            image = GeneratedImage(user_id=user_id, prompt=payload.message, image_url=image_url)
            session.add(image)
            session.commit()
            session.refresh(image)
            generated_image_id = image.id
        except ImageGenerationError as e:
            # the reply still goes out, just without a picture
            logger.warning(f"Chat image generation failed: {e}")

    try:
        if image_url:
            reply = chat_service.describe_generated_image(payload.message, training)
        else:
            reply = chat_service.ask_flower_expert(payload.message, training)
    except ChatServiceError as e:
        raise HTTPException(e.status_code, str(e))

    session.add(
        ChatHistory(
            session_id=session_id,
            user_id=user_id,
            message=payload.message,
            is_user=True,
            reference_image_uuid=payload.reference_image_uuid,
        )
    )
    session.add(
        ChatHistory(
            session_id=session_id,
            user_id=user_id,
            message=reply,
            is_user=False,
            image_url=image_url,
            meta={"generated_image_id": generated_image_id} if generated_image_id else None,
        )
    )
    session.commit()

    formatted = format_ai_response(reply)

    return {
        "session_id": session_id,
        "reply": reply,
        "image_url": image_url,
        "generated_image_id": generated_image_id,
        "flowers": formatted["flowers"],
        "text": formatted["text"],
    }


@router.get("/history/{session_id}")
def chat_history(session_id: str, session: Session = Depends(get_session)):
    messages = session.exec(
        select(ChatHistory)
        .where(ChatHistory.session_id == session_id)
        .order_by(ChatHistory.created_at, ChatHistory.is_user.desc())
    ).all()

    return [
        {
            "id": m.id,
            "message": m.message,
            "is_user": m.is_user,
            "image_url": m.image_url,
            "reference_image_uuid": m.reference_image_uuid,
            "metadata": m.meta,
            "created_at": m.created_at,
        }
        for m in messages
    ]


@router.post("/custom-order", status_code=201)
def create_custom_order(
    data: CustomOrderRequest,
    session: Session = Depends(get_session),
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
):
    try:
        order = place_custom_order(session, data, user_id=ctx.user_id if ctx else None)
    except CheckoutError as e:
        raise HTTPException(e.status_code, str(e))

    return {
        "message": "Custom order received. We'll confirm the final price shortly.",
        "order": order_to_dict(order),
    }
