from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol


@dataclass
class CustomerInfo:
    """Payer snapshot used for the booking record and provider billing data."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""

    def to_snapshot(self) -> Dict[str, str]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
        }


@dataclass
class ProviderOrder:
    id: Any
    raw: Dict[str, Any]


class PaymentProvider(Protocol):
    """Hosted-payment provider surface used by the booking initiator."""

    async def authenticate(self) -> str:  # pragma: no cover - interface
        ...

    async def create_order(self, token: str, amount: float, merchant_order_id: str) -> ProviderOrder:  # pragma: no cover - interface
        ...

    async def generate_payment_key(
        self,
        *,
        token: str,
        amount: float,
        order_id: Any,
        customer: CustomerInfo,
    ) -> str:  # pragma: no cover - interface
        ...

    def iframe_url(self, payment_token: str) -> str:  # pragma: no cover - interface
        ...
