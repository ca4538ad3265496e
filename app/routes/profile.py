from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.session_context import SessionContext, get_session_context
from app.models.notifications import Notification
from app.models.order import Order
from app.models.profile import Profile
from app.schemas.profile_schemas import ProfileUpdate
from app.services.order_service import get_order_items, order_to_dict

router = APIRouter()


def profile_to_dict(profile: Profile) -> dict:
    return {
        "id": profile.id,
        "email": profile.email,
        "full_name": profile.full_name,
        "phone": profile.phone,
        "address": profile.address,
        "avatar_url": profile.avatar_url,
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }


@router.get("/me")
def get_my_profile(
    session: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    profile = ctx.profile
    if not profile:
        # accounts created before profiles existed get one lazily
        profile = Profile(id=ctx.user_id, email=ctx.user.email)
        session.add(profile)
        session.commit()
        session.refresh(profile)
    return profile_to_dict(profile)


@router.put("/me")
def update_my_profile(
    data: ProfileUpdate,
    session: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    profile = session.get(Profile, ctx.user_id)
    if not profile:
        raise HTTPException(404, "Profile not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    profile.updated_at = datetime.utcnow()

    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile_to_dict(profile)


@router.get("/orders")
def my_orders(
    session: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    orders = session.exec(
        select(Order)
        .where(Order.user_id == ctx.user_id)
        .order_by(Order.created_at.desc())
    ).all()

    return [order_to_dict(o, get_order_items(session, o.id)) for o in orders]


@router.get("/notifications")
def my_notifications(
    unread_only: bool = False,
    session: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    query = select(Notification).where(Notification.user_id == ctx.user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712

    notifications = session.exec(query.order_by(Notification.created_at.desc())).all()

    return [
        {
            "id": n.id,
            "type": n.type,
            "title": n.title,
            "message": n.message,
            "metadata": n.meta,
            "is_read": n.is_read,
            "created_at": n.created_at,
        }
        for n in notifications
    ]


@router.patch("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: str,
    session: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    notification = session.get(Notification, notification_id)
    if not notification or notification.user_id != ctx.user_id:
        raise HTTPException(404, "Notification not found")

    notification.is_read = True
    notification.updated_at = datetime.utcnow()
    session.add(notification)
    session.commit()

    return {"message": "Notification marked as read", "notification_id": notification.id}
