"""
Order creation against the payment gateway.

Amounts arrive in the major currency unit (rupees) and are sent to the
gateway in minor units (paise). Conversion uses the amount's shortest
decimal form and rounds half away from zero, so 1.005 becomes 101 paise.
"""
from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from decimal import Decimal, DecimalException, ROUND_HALF_UP
from typing import Any, Optional

from app.errors import GatewayError, InvalidAmount, InvalidParameter
from app.logging_config import get_logger
from app.services.payments.base import OrderResult, PaymentGateway

logger = get_logger(__name__)

DEFAULT_CURRENCY = "INR"
RECEIPT_PREFIX = "receipt_"
MAX_RECEIPT_LENGTH = 40
_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")


def parse_amount(amount: Any) -> Decimal:
    """Return ``amount`` as a finite positive Decimal or raise InvalidAmount."""
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount()
    if isinstance(amount, str):
        amount = amount.strip()
        if not amount:
            raise InvalidAmount()
    elif not isinstance(amount, (int, float, Decimal)):
        raise InvalidAmount()
    try:
        # str() gives the shortest repr for floats, so 1.005 stays 1.005
        value = Decimal(str(amount))
    except (DecimalException, ValueError):
        raise InvalidAmount()
    if not value.is_finite() or value <= 0:
        raise InvalidAmount()
    return value


def to_minor_units(amount: Any) -> int:
    """Major units -> integer minor units, ROUND_HALF_UP (half away from zero)."""
    value = parse_amount(amount)
    try:
        minor = int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except DecimalException:
        # exponent too large to scale or quantize
        raise InvalidAmount()
    if minor <= 0:
        # below half a paisa
        raise InvalidAmount()
    return minor


def normalize_currency(currency: Optional[str]) -> str:
    if currency is None:
        return DEFAULT_CURRENCY
    if not isinstance(currency, str) or not _CURRENCY_RE.match(currency.strip()):
        raise InvalidParameter("Invalid currency. Please provide a 3-letter currency code.")
    return currency.strip().upper()


def make_receipt(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{RECEIPT_PREFIX}{now_ms}"


def normalize_receipt(receipt: Optional[str]) -> str:
    if receipt is None or (isinstance(receipt, str) and not receipt.strip()):
        return make_receipt()
    if not isinstance(receipt, str) or len(receipt) > MAX_RECEIPT_LENGTH:
        raise InvalidParameter(f"Invalid receipt. Receipt must be at most {MAX_RECEIPT_LENGTH} characters.")
    return receipt


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class OrderCreator:
    """Validates an order request and creates the order on the gateway."""

    def __init__(self, gateway: PaymentGateway, environment: str = "development"):
        self.gateway = gateway
        self.environment = environment

    def build_payload(self, amount: Any, currency: Optional[str] = None, receipt: Optional[str] = None) -> dict:
        return {
            "amount": to_minor_units(amount),
            "currency": normalize_currency(currency),
            "receipt": normalize_receipt(receipt),
            "notes": {
                "created_at": datetime.now(timezone.utc).isoformat(),
                "environment": self.environment,
            },
        }

    async def create_order(self, amount: Any, currency: Optional[str] = None, receipt: Optional[str] = None) -> OrderResult:
        payload = self.build_payload(amount, currency, receipt)
        logger.info(
            "order_create_requested",
            amount=payload["amount"],
            currency=payload["currency"],
            receipt=payload["receipt"],
        )

        data = await self.gateway.create_order(payload)

        if not isinstance(data, dict):
            raise GatewayError("Invalid order response")
        order_id = data.get("id")
        amount_minor = data.get("amount", payload["amount"])
        currency = data.get("currency") or payload["currency"]
        receipt = data.get("receipt") or payload["receipt"]
        created_at = data.get("created_at")
        if not (
            isinstance(order_id, str) and order_id
            and _is_int(amount_minor)
            and isinstance(currency, str)
            and isinstance(receipt, str)
            and (created_at is None or _is_int(created_at))
        ):
            logger.warning("order_response_invalid", order_id=order_id)
            raise GatewayError("Invalid order response")

        order = OrderResult(
            id=order_id,
            currency=currency,
            amount=amount_minor,
            receipt=receipt,
            created_at=created_at,
        )
        logger.info("order_created", order_id=order.id, amount=order.amount, currency=order.currency)
        return order
