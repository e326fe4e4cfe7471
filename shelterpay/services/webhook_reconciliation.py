from __future__ import annotations

"""Paymob transaction callback -> booking payment outcome.

The public entrypoint is `reconcile_payment_notification`, called from the
webhook router. It is responsible for:
- normalising the callback body into a PaymobNotification
- resolving the booking (merchant_order_id first, provider order id second)
- applying the payment outcome as an unconditional merge-update

Redelivery of the same callback writes the same fields again, so the result
does not depend on how many times or in which order callbacks arrive.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from shelterpay.domain.booking_status import payment_status_for
from shelterpay.errors import UnresolvedWebhookError
from shelterpay.repositories.booking_repository import BookingRepository
from shelterpay.utils import now_utc

logger = logging.getLogger(__name__)


RESOLVED_BY_MERCHANT_ORDER_ID = "merchant_order_id"
RESOLVED_BY_PROVIDER_ORDER_ID = "provider_order_id"


@dataclass(frozen=True)
class PaymobNotification:
    success: bool = False
    order_id: Optional[Any] = None
    merchant_order_id: Optional[str] = None
    transaction_id: Optional[Any] = None
    amount_cents: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "PaymobNotification":
        """Parse a callback body, wrapped in `obj` or not.

        Missing or malformed fields fall back to None/False; this never raises.
        """

        if not isinstance(payload, dict):
            return cls()
        obj = payload.get("obj")
        if not isinstance(obj, dict):
            obj = payload

        order = obj.get("order")
        if not isinstance(order, dict):
            order = {}

        merchant_order_id = order.get("merchant_order_id") or obj.get("merchant_order_id") or None
        amount_cents = obj.get("amount_cents")
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, (int, float)):
            amount_cents = None

        return cls(
            success=obj.get("success") is True,
            order_id=order.get("id") or None,
            merchant_order_id=str(merchant_order_id) if merchant_order_id is not None else None,
            transaction_id=obj.get("id") or None,
            amount_cents=amount_cents,
        )

    def outcome_fields(self) -> Dict[str, Any]:
        return {
            "paymentStatus": payment_status_for(self.success),
            "paidAt": now_utc() if self.success else None,
            "transactionId": self.transaction_id,
            "providerOrderId": self.order_id,
            "amount": self.amount_cents / 100 if self.amount_cents is not None else None,
        }


@dataclass
class ResolvedBooking:
    booking_id: str
    resolved_by: str


@dataclass
class ReconciliationResult:
    booking_id: str
    resolved_by: str
    payment_status: str


async def resolve_booking(repo: BookingRepository, notification: PaymobNotification) -> Optional[ResolvedBooking]:
    """Two-step lookup: booking id == merchant_order_id, then provider order id."""

    if notification.merchant_order_id:
        doc = await repo.get_by_id(notification.merchant_order_id)
        if doc is not None:
            return ResolvedBooking(str(doc["_id"]), RESOLVED_BY_MERCHANT_ORDER_ID)

    if notification.order_id:
        doc = await repo.find_by_provider_order_id(notification.order_id)
        if doc is not None:
            return ResolvedBooking(str(doc["_id"]), RESOLVED_BY_PROVIDER_ORDER_ID)

    return None


async def reconcile_payment_notification(repo: BookingRepository, payload: Any) -> ReconciliationResult:
    notification = PaymobNotification.from_payload(payload)

    resolved = await resolve_booking(repo, notification)
    if resolved is None:
        logger.warning(
            "Webhook: booking not found (merchant_order_id=%s, order_id=%s)",
            notification.merchant_order_id,
            notification.order_id,
        )
        raise UnresolvedWebhookError(notification.merchant_order_id, notification.order_id)

    update = notification.outcome_fields()
    await repo.merge_update(resolved.booking_id, update)

    logger.info(
        "Webhook: booking %s -> %s (resolved by %s, transaction %s)",
        resolved.booking_id,
        update["paymentStatus"],
        resolved.resolved_by,
        notification.transaction_id,
    )
    return ReconciliationResult(
        booking_id=resolved.booking_id,
        resolved_by=resolved.resolved_by,
        payment_status=update["paymentStatus"],
    )
