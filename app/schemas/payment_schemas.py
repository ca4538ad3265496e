from pydantic import BaseModel, Field
from typing import Optional


class CreatePaymentSession(BaseModel):
    orderId: Optional[str] = None
    amount: Optional[float] = Field(None, allow_inf_nan=False)


class VerifyPaymentRequest(BaseModel):
    sessionId: Optional[str] = None
