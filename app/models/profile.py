from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    # same id as the owning user
    id: str = Field(foreign_key="users.id", primary_key=True)
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
