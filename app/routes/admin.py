# -------- ADMIN: IMAGES, TRAINING DATA, ROLES --------
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_admin
from app.dependencies.session_context import SessionContext
from app.models.generated_image import GeneratedImage, ImageStatus
from app.models.training_data import TrainingData
from app.models.user import User
from app.models.user_role import AppRole, UserRole
from app.schemas.chat_schemas import TrainingDataCreate
from app.schemas.image_schemas import ImageStatusUpdate
from app.schemas.user_schemas import RoleGrant

logger = logging.getLogger(__name__)

router = APIRouter()


def image_to_dict(image: GeneratedImage) -> dict:
    return {
        "id": image.id,
        "user_id": image.user_id,
        "prompt": image.prompt,
        "image_url": image.image_url,
        "thumbnail_url": image.thumbnail_url,
        "status": image.status,
        "created_at": image.created_at,
    }


@router.get("/images")
def list_generated_images(
    status: ImageStatus | None = None,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    query = select(GeneratedImage)
    if status:
        query = query.where(GeneratedImage.status == status.value)

    images = session.exec(query.order_by(GeneratedImage.created_at.desc())).all()
    return [image_to_dict(i) for i in images]


@router.patch("/images/{image_id}/status")
def moderate_image(
    image_id: str,
    payload: ImageStatusUpdate,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    if payload.status not in (ImageStatus.approved.value, ImageStatus.rejected.value):
        raise HTTPException(400, "Status must be approved or rejected")

    image = session.get(GeneratedImage, image_id)
    if not image:
        raise HTTPException(404, "Image not found")

    image.status = payload.status
    session.add(image)
    session.commit()
    session.refresh(image)

    logger.info(f"Generated image {image.id} {image.status}")
    return image_to_dict(image)


@router.get("/training-data")
def list_training_data(
    category: str | None = None,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    query = select(TrainingData)
    if category:
        query = query.where(TrainingData.category == category)
    return session.exec(query.order_by(TrainingData.created_at.desc())).all()


@router.post("/training-data", status_code=201)
def add_training_data(
    payload: TrainingDataCreate,
    session: Session = Depends(get_session),
    admin: SessionContext = Depends(require_admin),
):
    entry = TrainingData(
        question=payload.question,
        answer=payload.answer,
        category=payload.category or "general",
        created_by=admin.user_id,
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


@router.delete("/training-data/{entry_id}")
def delete_training_data(
    entry_id: str,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    entry = session.get(TrainingData, entry_id)
    if not entry:
        raise HTTPException(404, "Training data not found")

    session.delete(entry)
    session.commit()
    return {"message": "Training data deleted", "id": entry_id}


@router.post("/roles")
def grant_role(
    payload: RoleGrant,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    if payload.role not in [r.value for r in AppRole]:
        raise HTTPException(400, "Invalid role")

    user = session.exec(select(User).where(User.email == payload.email)).first()
    if not user:
        raise HTTPException(404, "User not found")

    existing = session.exec(
        select(UserRole).where(UserRole.user_id == user.id, UserRole.role == payload.role)
    ).first()
    if not existing:
        session.add(UserRole(user_id=user.id, role=payload.role))
        session.commit()
        logger.info(f"Role {payload.role} granted to {user.email}")

    roles = session.exec(select(UserRole.role).where(UserRole.user_id == user.id)).all()
    return {"user_id": user.id, "email": user.email, "roles": list(roles)}
