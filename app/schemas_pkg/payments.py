from pydantic import BaseModel, Field
from typing import Any, Optional


class CreatePaymentOrderRequest(BaseModel):
    amount: Any = None        # major units; validated by OrderCreator
    currency: Optional[str] = None
    receipt: Optional[str] = None


class OrderOut(BaseModel):
    id: str
    currency: str
    amount: int               # in paise / cents
    receipt: str
    created_at: Optional[int] = None


class CreatePaymentOrderResponse(BaseModel):
    success: bool = True
    order: OrderOut


class VerifyPaymentRequest(BaseModel):
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    signature: Optional[str] = None


class PaymentDetailsOut(BaseModel):
    id: str
    amount: Optional[int] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    method: Optional[str] = None


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    message: str
    payment_details: Optional[PaymentDetailsOut] = Field(default=None, serialization_alias="paymentDetails")
    details_unavailable: Optional[bool] = Field(default=None, serialization_alias="detailsUnavailable")


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str
