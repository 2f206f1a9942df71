from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from app.errors import GatewayError
from app.logging_config import get_logger

logger = get_logger(__name__)

UNAVAILABLE = "Payment gateway unavailable"


class RazorpayGateway:
    """Razorpay REST client. One instance is shared by all in-flight requests."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com",
        timeout: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not key_id or not key_secret:
            raise ValueError("Razorpay not configured")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            r = await self._client.request(method, path, json=json)
        except httpx.TimeoutException:
            logger.warning("gateway_timeout", method=method, path=path)
            raise GatewayError("Payment gateway timed out")
        except httpx.HTTPError as e:
            logger.warning("gateway_transport_error", method=method, path=path, error_type=type(e).__name__)
            raise GatewayError(UNAVAILABLE)

        if r.is_error:
            message = _error_description(r)
            logger.warning("gateway_error_response", method=method, path=path, status_code=r.status_code, gateway_message=message)
            raise GatewayError(message, status=r.status_code)

        try:
            return r.json()
        except ValueError:
            raise GatewayError("Invalid response from payment gateway", status=r.status_code)

    async def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/v1/orders", json=payload)

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        path = quote(payment_id.encode("utf-8", "surrogatepass"), safe="")
        return await self._request("GET", f"/v1/payments/{path}")

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_description(r: httpx.Response) -> str:
    # Razorpay errors look like {"error": {"code": ..., "description": ...}}
    try:
        body = r.json()
    except ValueError:
        return f"Payment gateway returned HTTP {r.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("description"):
        return str(error["description"])
    return f"Payment gateway returned HTTP {r.status_code}"
