from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class ChatHistory(SQLModel, table=True):
    __tablename__ = "chat_history"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id")

    message: str
    is_user: bool = Field(default=True)

    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    reference_image_uuid: Optional[str] = None
    meta: Optional[dict] = Field(default=None, sa_column=Column("metadata", JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
