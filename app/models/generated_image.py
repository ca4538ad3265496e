from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class ImageStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class GeneratedImage(SQLModel, table=True):
    __tablename__ = "generated_images"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    prompt: str
    image_url: str
    thumbnail_url: Optional[str] = None
    status: str = Field(default=ImageStatus.pending.value)
    created_at: datetime = Field(default_factory=datetime.utcnow)
