import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.session_context import (
    SessionContext,
    get_optional_session_context,
    get_session_context,
)
from app.models.generated_image import GeneratedImage
from app.models.reference_image import ReferenceImage
from app.schemas.image_schemas import GenerateImageRequest, UploadImageRequest
from app.services import image_service
from app.services.image_service import ImageGenerationError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate")
def generate_image(
    payload: GenerateImageRequest,
    session: Session = Depends(get_session),
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
):
    if not payload.prompt or not payload.prompt.strip():
        raise HTTPException(400, "Prompt is required")

    if payload.useImageToImage and not payload.baseImageUUID:
        raise HTTPException(400, "baseImageUUID is required for image-to-image generation")

    try:
        result = image_service.generate_image(
            payload.prompt,
            use_image_to_image=payload.useImageToImage,
            base_image_uuid=payload.baseImageUUID,
        )
    except ImageGenerationError as e:
        raise HTTPException(e.status_code, str(e))

    if ctx:
        image = GeneratedImage(
            user_id=ctx.user_id,
            prompt=payload.prompt,
            image_url=result["image_url"],
        )
        session.add(image)
        session.commit()
        session.refresh(image)
        result["generated_image_id"] = image.id

    return result


@router.post("/upload")
def upload_image(
    payload: UploadImageRequest,
    session: Session = Depends(get_session),
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
):
    if not payload.image or not payload.taskUUID:
        raise HTTPException(400, "Image and taskUUID are required")

    try:
        result = image_service.upload_image(payload.image, payload.taskUUID)
    except ImageGenerationError as e:
        raise HTTPException(e.status_code, str(e))

    if ctx and result.get("imageUUID"):
        session.add(
            ReferenceImage(
                user_id=ctx.user_id,
                image_uuid=result["imageUUID"],
                image_url=f"runware://{result['imageUUID']}",
            )
        )
        session.commit()

    return result


@router.get("/references")
def my_reference_images(
    session: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    images = session.exec(
        select(ReferenceImage)
        .where(ReferenceImage.user_id == ctx.user_id)
        .order_by(ReferenceImage.created_at.desc())
    ).all()

    return [
        {
            "id": i.id,
            "image_uuid": i.image_uuid,
            "image_url": i.image_url,
            "prompt": i.prompt,
            "created_at": i.created_at,
        }
        for i in images
    ]
