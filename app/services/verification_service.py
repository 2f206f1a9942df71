"""
Payment signature verification.

The gateway signs a completed checkout as
HMAC-SHA256(key_secret, "<order_id>|<payment_id>") in lowercase hex.
Verification recomputes that digest and compares it with
hmac.compare_digest. Fetching payment details afterwards is a separate,
independently failable step and never changes the verdict.
"""
from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.errors import GatewayError, MissingParameter
from app.logging_config import get_logger
from app.services.payments.base import PaymentDetails, PaymentGateway

logger = get_logger(__name__)


class VerificationOutcome(str, Enum):
    MATCHED = "matched"
    MISMATCHED = "mismatched"


@dataclass(frozen=True)
class VerificationResult:
    outcome: VerificationOutcome
    details: Optional[PaymentDetails] = None
    details_unavailable: bool = False

    @property
    def is_valid(self) -> bool:
        return self.outcome is VerificationOutcome.MATCHED


def _require(**params) -> None:
    for name, value in params.items():
        if not isinstance(value, str) or not value:
            logger.info("verification_rejected", missing=name)
            raise MissingParameter()


def compute_signature(order_id: str, payment_id: str, secret: bytes) -> str:
    # surrogatepass: lone surrogates from JSON input encode instead of raising
    message = f"{order_id}|{payment_id}".encode("utf-8", "surrogatepass")
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: bytes) -> bool:
    """
    True if ``signature`` is the hex HMAC of ``order_id|payment_id``.

    Raises MissingParameter if any input is empty. A wrong signature is
    a normal False, not an error.
    """
    _require(order_id=order_id, payment_id=payment_id, signature=signature)
    expected = compute_signature(order_id, payment_id, secret)
    # bytes so any non-ASCII input, lone surrogates included, compares as unequal
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8", "surrogatepass"))


class PaymentVerifier:
    def __init__(self, secret: bytes, gateway: Optional[PaymentGateway] = None, fetch_details: bool = True):
        self._secret = secret
        self.gateway = gateway
        self.fetch_details = fetch_details and gateway is not None

    def __repr__(self):
        return f"<PaymentVerifier(fetch_details={self.fetch_details})>"

    async def verify(self, order_id: str, payment_id: str, signature: str) -> VerificationResult:
        if not verify_signature(order_id, payment_id, signature, self._secret):
            logger.info("signature_mismatched", order_id=order_id, payment_id=payment_id)
            return VerificationResult(VerificationOutcome.MISMATCHED)

        logger.info("signature_matched", order_id=order_id, payment_id=payment_id)
        if not self.fetch_details:
            return VerificationResult(VerificationOutcome.MATCHED)

        try:
            details = await self.fetch_payment_details(payment_id)
        except GatewayError as e:
            logger.warning("payment_details_unavailable", payment_id=payment_id, gateway_message=e.message)
            return VerificationResult(VerificationOutcome.MATCHED, details_unavailable=True)
        return VerificationResult(VerificationOutcome.MATCHED, details=details)

    async def fetch_payment_details(self, payment_id: str) -> PaymentDetails:
        data = await self.gateway.fetch_payment(payment_id)
        if not isinstance(data, dict) or not data.get("id"):
            raise GatewayError("Invalid payment response")
        return PaymentDetails.from_gateway(data)
