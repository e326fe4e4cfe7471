from __future__ import annotations

from typing import Any, Literal

from shelterpay.errors import InvalidStatusError


BookingStatus = Literal["pending", "accepted", "rejected", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed"]


# Approval lifecycle. Any value may move to any other; this axis is
# independent of paymentStatus, which payment callbacks set.
BOOKING_STATUSES = ("pending", "accepted", "rejected", "cancelled")

# Extra timestamp stamped when the approval status moves to the key.
STATUS_TIMESTAMP_FIELDS = {
    "accepted": "acceptedAt",
    "rejected": "rejectedAt",
}


def validate_booking_status(status: Any) -> BookingStatus:
    """Return `status` if it is a known approval status.

    Raises InvalidStatusError otherwise.
    """

    if not isinstance(status, str) or status not in BOOKING_STATUSES:
        raise InvalidStatusError(status)
    return status


def payment_status_for(success: bool) -> PaymentStatus:
    return "paid" if success else "failed"
