from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional


class OrderFieldUpdates(BaseModel):
    """Descriptive order fields an admin may edit. Prices and status have their own flows."""
    model_config = ConfigDict(extra="forbid")

    customer_name: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = None
    delivery_address: Optional[str] = None
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    estimated_price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)


class OrderStatusUpdateRequest(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None
    updates: Optional[OrderFieldUpdates] = None


class OrderPriceRequest(BaseModel):
    price: float


class CheckoutItem(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CheckoutRequest(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    delivery_address: str = Field(..., min_length=1)
    special_instructions: Optional[str] = None
    items: List[CheckoutItem] = Field(..., min_length=1)


class CustomOrderRequest(BaseModel):
    generated_image_id: str
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    delivery_address: str = Field(..., min_length=1)
    estimated_price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    notes: Optional[str] = None
