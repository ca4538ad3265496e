from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING
from datetime import datetime
from uuid import uuid4

if TYPE_CHECKING:
    from app.models.order import Order

class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
    # plain reference; the snapshot below outlives product edits and deletes
    product_id: Optional[str] = Field(default=None, index=True)

    # snapshot of the product at purchase time
    product_name: str
    product_price: float
    quantity: int
    price: float
    subtotal: float

    created_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="items")
