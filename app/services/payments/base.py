from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Protocol


@dataclass(frozen=True)
class OrderResult:
    id: str
    currency: str
    amount: int  # minor units
    receipt: str
    created_at: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PaymentDetails:
    id: str
    amount: Optional[int]
    currency: Optional[str]
    status: Optional[str]
    method: Optional[str]

    @classmethod
    def from_gateway(cls, data: Dict[str, Any]) -> "PaymentDetails":
        return cls(
            id=data.get("id"),
            amount=data.get("amount"),
            currency=data.get("currency"),
            status=data.get("status"),
            method=data.get("method"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PaymentGateway(Protocol):
    async def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a gateway order from {amount, currency, receipt, notes}.
        Returns the gateway's order entity; raises GatewayError on failure.
        """
        ...

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        """
        Return the gateway's payment entity for ``payment_id``.
        """
        ...

    async def aclose(self) -> None:
        ...
