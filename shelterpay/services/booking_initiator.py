from __future__ import annotations

"""Booking initiator: pending booking + Paymob hosted-payment session.

Sequence (not transactional):
1. insert booking (paymentStatus/bookingStatus = pending)
2. authenticate + create remote order with merchant_order_id = booking id
3. attach provider order id to the booking (best-effort)
4. generate payment key
5. build iframe URL

Once step 1 succeeded the booking is never rolled back; a failure in later
steps leaves it pending for manual reconciliation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from shelterpay.config import BOOKING_CURRENCY
from shelterpay.errors import StoreError, ValidationError
from shelterpay.repositories.booking_repository import BookingRepository
from shelterpay.schemas import CreatePaymentSessionRequest
from shelterpay.services.payments_provider.base import CustomerInfo, PaymentProvider
from shelterpay.utils import now_utc, parse_datetime

logger = logging.getLogger(__name__)


@dataclass
class PaymentSession:
    booking_id: str
    provider_order_id: Any
    iframe_url: str


def _date_field(booking_data: Dict[str, Any], key: str):
    try:
        return parse_datetime(booking_data.get(key))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {key} value.", {"field": f"bookingData.{key}"}) from exc


def customer_from_request(request: CreatePaymentSessionRequest) -> CustomerInfo:
    user = request.userData
    return CustomerInfo(
        first_name=user.firstName,
        last_name=user.lastName,
        email=user.email,
        phone=user.phone,
    )


def build_booking_document(request: CreatePaymentSessionRequest) -> Dict[str, Any]:
    """Booking document for a new payment session.

    Keeps the raw bookingData blob and adds flattened, typed projections of the
    fields that are queried on.
    """

    booking_data = dict(request.bookingData or {})
    customer = customer_from_request(request)
    pet_ids = booking_data.get("petIds")

    return {
        "userId": request.userId,
        "shelterId": request.shelterId,
        "amount": float(request.amount),
        "currency": BOOKING_CURRENCY,
        "bookingStatus": "pending",
        "paymentStatus": "pending",
        "createdAt": now_utc(),
        "providerOrderId": None,
        "bookingData": booking_data,
        "location": booking_data.get("location"),
        "fromDate": _date_field(booking_data, "fromDate"),
        "toDate": _date_field(booking_data, "toDate"),
        "nights": booking_data.get("nights"),
        "petCount": booking_data.get("petCount"),
        "petIds": list(pet_ids) if isinstance(pet_ids, list) else [],
        "customer": customer.to_snapshot(),
    }


class BookingInitiator:
    def __init__(self, repo: BookingRepository, provider: PaymentProvider) -> None:
        self._repo = repo
        self._provider = provider

    async def create_payment_session(self, request: CreatePaymentSessionRequest) -> PaymentSession:
        doc = build_booking_document(request)
        booking_id = await self._repo.create(doc)
        logger.info("Created pending booking %s for user %s", booking_id, request.userId)

        token = await self._provider.authenticate()
        order = await self._provider.create_order(token, request.amount, booking_id)

        await self._attach_provider_order(booking_id, order.id)

        payment_token = await self._provider.generate_payment_key(
            token=token,
            amount=request.amount,
            order_id=order.id,
            customer=customer_from_request(request),
        )

        logger.info("Payment session ready for booking %s (provider order %s)", booking_id, order.id)
        return PaymentSession(
            booking_id=booking_id,
            provider_order_id=order.id,
            iframe_url=self._provider.iframe_url(payment_token),
        )

    async def _attach_provider_order(self, booking_id: str, provider_order_id: Optional[Any]) -> None:
        # Webhooks can still resolve through merchant_order_id if this write fails.
        try:
            await self._repo.merge_update(booking_id, {"providerOrderId": provider_order_id})
        except StoreError as exc:
            logger.warning(
                "Could not attach provider order %s to booking %s: %s",
                provider_order_id,
                booking_id,
                exc.reason,
            )
