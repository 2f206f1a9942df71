from .payments import (
    CreatePaymentOrderRequest,
    CreatePaymentOrderResponse,
    ErrorResponse,
    HealthResponse,
    OrderOut,
    PaymentDetailsOut,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

__all__ = [
    "CreatePaymentOrderRequest",
    "CreatePaymentOrderResponse",
    "ErrorResponse",
    "HealthResponse",
    "OrderOut",
    "PaymentDetailsOut",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
]
