from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type

import httpx

from shelterpay.config import (
    BOOKING_CURRENCY,
    PAYMOB_API_KEY,
    PAYMOB_BASE_URL,
    PAYMOB_IFRAME_BASE_URL,
    PAYMOB_IFRAME_ID,
    PAYMOB_INTEGRATION_ID,
    PAYMOB_PAYMENT_KEY_EXPIRATION,
    PAYMOB_TIMEOUT_SECONDS,
)
from shelterpay.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamOrderError,
    UpstreamTokenError,
)
from shelterpay.services.payments_provider.base import CustomerInfo, ProviderOrder
from shelterpay.utils import to_minor_units

logger = logging.getLogger(__name__)

# Paymob rejects payment keys whose billing_data misses any of these.
_BILLING_PLACEHOLDER_FIELDS = (
    "apartment",
    "floor",
    "street",
    "building",
    "shipping_method",
    "postal_code",
    "city",
    "country",
    "state",
)


class PaymobClient:
    """Thin async client for the Paymob Accept API.

    - authenticate -> POST /auth/tokens
    - create_order -> POST /ecommerce/orders
    - generate_payment_key -> POST /acceptance/payment_keys

    Every transport error, non-2xx status or missing field is raised as the
    matching UpstreamError subclass. No retries.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        integration_id: Optional[str] = None,
        iframe_id: Optional[str] = None,
        iframe_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        currency: str = BOOKING_CURRENCY,
    ) -> None:
        self.base_url = (base_url or PAYMOB_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else PAYMOB_API_KEY
        self.integration_id = integration_id if integration_id is not None else PAYMOB_INTEGRATION_ID
        self.iframe_id = iframe_id if iframe_id is not None else PAYMOB_IFRAME_ID
        self.iframe_base_url = (iframe_base_url or PAYMOB_IFRAME_BASE_URL).rstrip("/")
        self.timeout = float(timeout or PAYMOB_TIMEOUT_SECONDS or 10.0)
        self.currency = currency

    async def _post(self, path: str, payload: Dict[str, Any], error_cls: Type[UpstreamError]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("Paymob POST %s", path)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers={"Accept": "application/json"})
        except httpx.TimeoutException as exc:
            raise error_cls(f"timeout calling {path}") from exc
        except httpx.HTTPError as exc:
            raise error_cls(f"transport error calling {path}: {exc}") from exc

        if resp.status_code >= 400:
            raise error_cls(
                f"{path} returned {resp.status_code}: {resp.text[:200]}",
                upstream_status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise error_cls(f"{path} returned a non-JSON body", upstream_status=resp.status_code) from exc

        if not isinstance(data, dict):
            raise error_cls(f"{path} returned an unexpected body", upstream_status=resp.status_code)
        return data

    async def authenticate(self) -> str:
        data = await self._post("/auth/tokens", {"api_key": self.api_key}, UpstreamAuthError)
        token = data.get("token")
        if not token:
            raise UpstreamAuthError("auth response has no token")
        return str(token)

    async def create_order(self, token: str, amount: float, merchant_order_id: str) -> ProviderOrder:
        payload = {
            "auth_token": token,
            "delivery_needed": False,
            "amount_cents": to_minor_units(amount),
            "currency": self.currency,
            "merchant_order_id": merchant_order_id,
            "items": [],
        }
        data = await self._post("/ecommerce/orders", payload, UpstreamOrderError)
        order_id = data.get("id")
        if order_id is None:
            raise UpstreamOrderError("order response has no id")
        return ProviderOrder(id=order_id, raw=data)

    async def generate_payment_key(
        self,
        *,
        token: str,
        amount: float,
        order_id: Any,
        customer: CustomerInfo,
    ) -> str:
        billing_data: Dict[str, Any] = {
            "first_name": customer.first_name or "NA",
            "last_name": customer.last_name or "NA",
            "email": customer.email or "NA",
            "phone_number": customer.phone or "NA",
        }
        for field in _BILLING_PLACEHOLDER_FIELDS:
            billing_data[field] = "NA"

        payload = {
            "auth_token": token,
            "amount_cents": to_minor_units(amount),
            "expiration": PAYMOB_PAYMENT_KEY_EXPIRATION,
            "order_id": order_id,
            "billing_data": billing_data,
            "currency": self.currency,
            "integration_id": _as_int(self.integration_id),
        }
        data = await self._post("/acceptance/payment_keys", payload, UpstreamTokenError)
        payment_token = data.get("token")
        if not payment_token:
            raise UpstreamTokenError("payment key response has no token")
        return str(payment_token)

    def iframe_url(self, payment_token: str) -> str:
        return f"{self.iframe_base_url}/{self.iframe_id}?payment_token={payment_token}"


def _as_int(value: Any) -> Any:
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


paymob_client = PaymobClient()


def get_payment_provider() -> PaymobClient:
    """FastAPI dependency returning the process-wide provider client."""
    return paymob_client
