from .base import OrderResult, PaymentDetails, PaymentGateway
from .razorpay_adapter import RazorpayGateway

__all__ = ["OrderResult", "PaymentDetails", "PaymentGateway", "RazorpayGateway"]
