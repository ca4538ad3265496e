from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, index=True)
    image_url: Optional[str] = None
    is_active: bool = Field(default=True)

    #timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
