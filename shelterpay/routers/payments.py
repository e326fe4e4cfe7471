from __future__ import annotations

"""Paymob payment routes.

- POST /pay                      create booking + hosted-payment session
- POST /webhook                  Paymob transaction callback
- PATCH /bookings/{id}/status    approval decision (independent of payment)

Errors are raised as AppError subclasses and rendered by the global
exception handlers; response bodies never carry internal state.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from shelterpay.db import get_db
from shelterpay.repositories.booking_repository import BookingRepository
from shelterpay.schemas import (
    CreatePaymentSessionRequest,
    OkResponse,
    PaymentSessionResponse,
    UpdateBookingStatusRequest,
)
from shelterpay.services.booking_initiator import BookingInitiator
from shelterpay.services.booking_status import update_booking_status
from shelterpay.services.payments_provider.paymob import get_payment_provider
from shelterpay.services.webhook_reconciliation import reconcile_payment_notification

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


async def get_booking_repository(db=Depends(get_db)) -> BookingRepository:
    return BookingRepository(db)


@router.post("/pay", response_model=PaymentSessionResponse)
async def create_payment_session(
    payload: CreatePaymentSessionRequest,
    repo: BookingRepository = Depends(get_booking_repository),
    provider=Depends(get_payment_provider),
):
    session = await BookingInitiator(repo, provider).create_payment_session(payload)
    return PaymentSessionResponse(iframeUrl=session.iframe_url)


@router.post("/webhook", response_model=OkResponse)
async def paymob_webhook(request: Request, repo: BookingRepository = Depends(get_booking_repository)):
    # HMAC verification of the raw body is not performed.
    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning("Webhook: body is not valid JSON")
        payload = {}

    await reconcile_payment_notification(repo, payload)
    return OkResponse()


@router.patch("/bookings/{booking_id}/status", response_model=OkResponse)
async def patch_booking_status(
    booking_id: str,
    payload: UpdateBookingStatusRequest,
    repo: BookingRepository = Depends(get_booking_repository),
):
    await update_booking_status(
        repo,
        booking_id,
        payload.status,
        actor_id=payload.actorId,
        note=payload.note,
    )
    return OkResponse()
