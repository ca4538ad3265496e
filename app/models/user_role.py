from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class AppRole(str, Enum):
    admin = "admin"
    seller = "seller"
    customer = "customer"


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    role: str = Field(default=AppRole.customer.value)
    created_at: datetime = Field(default_factory=datetime.utcnow)
