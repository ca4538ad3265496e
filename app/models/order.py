from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from uuid import uuid4

from app.constants.order_status import OrderStatus
from app.models.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    delivery_address: str
    shipping_address: Optional[str] = None

    total_amount: float
    estimated_price: Optional[float] = None
    final_price: Optional[float] = None
    is_price_overridden: bool = Field(default=False)
    price_locked: bool = Field(default=False)

    status: str = Field(default=OrderStatus.pending.value, index=True)

    payment_method: Optional[str] = None
    # payment-processor checkout id (razorpay payment link)
    payment_reference: Optional[str] = Field(default=None, index=True)
    payment_details: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    notes: Optional[str] = None
    generated_image_id: Optional[str] = Field(default=None, foreign_key="generated_images.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")
