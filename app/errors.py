"""
Error types for the payment endpoints.

Each PaymentError carries the HTTP status it maps to and a client-safe
``error`` string. Handlers in app.main render them as
``{"success": false, "error": ...}``.
"""
from typing import Optional


class PaymentError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    error: str = "Payment request failed"

    def __init__(self, error: Optional[str] = None, message: Optional[str] = None):
        self.error = error or self.error
        self.message = message
        super().__init__(message or self.error)

    def to_payload(self) -> dict:
        payload = {"success": False, "error": self.error}
        if self.message:
            payload["message"] = self.message
        return payload


class ClientError(PaymentError):
    status_code = 400
    error = "Bad request"


class InvalidAmount(ClientError):
    error = "Invalid amount. Please provide a positive number."


class InvalidParameter(ClientError):
    error = "Invalid parameter"


class MissingParameter(ClientError):
    error = "Missing required parameters"


class SignatureMismatch(ClientError):
    error = "Invalid payment signature"


class GatewayError(PaymentError):
    """Upstream gateway failure. ``message`` is the gateway's own description."""

    status_code = 500
    error = "Payment gateway error"

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message=message)
        self.upstream_status = status


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


# Body for any failure that is not a PaymentError; never carries exception text
INTERNAL_ERROR_PAYLOAD = {"success": False, "error": "Something broke!"}
