from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from shelterpay.domain.booking_status import STATUS_TIMESTAMP_FIELDS, validate_booking_status
from shelterpay.errors import NotFoundError
from shelterpay.repositories.booking_repository import BookingRepository
from shelterpay.utils import now_utc

logger = logging.getLogger(__name__)


async def update_booking_status(
    repo: BookingRepository,
    booking_id: str,
    status: Any,
    *,
    actor_id: Optional[str] = None,
    note: Optional[str] = None,
) -> Dict[str, Any]:
    """Record an approval decision on a booking.

    The status is validated before the store is touched. paymentStatus is
    never modified here. Returns the fields written.
    """

    status = validate_booking_status(status)

    booking = await repo.get_by_id(booking_id)
    if booking is None:
        raise NotFoundError(booking_id)

    stamp = now_utc()
    update: Dict[str, Any] = {
        "bookingStatus": status,
        "statusUpdatedAt": stamp,
        "statusUpdatedBy": actor_id,
    }
    stamp_field = STATUS_TIMESTAMP_FIELDS.get(status)
    if stamp_field:
        update[stamp_field] = stamp
    if note:
        update["statusNote"] = note

    await repo.merge_update(booking_id, update)
    logger.info("Booking %s status %s -> %s by %s", booking_id, booking.get("bookingStatus"), status, actor_id)
    return update
