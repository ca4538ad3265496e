from typing import Optional
from sqlmodel import Session
from app.models.notifications import Notification


def create_notification(
    *,
    session: Session,
    user_id: str,
    type: str,
    title: str,
    message: str,
    meta: Optional[dict] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        meta=meta,
    )
    session.add(notification)
    session.flush()
    return notification
