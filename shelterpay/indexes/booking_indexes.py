from __future__ import annotations

"""Indexes for the bookings collection."""

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure
import logging

from shelterpay.config import BOOKINGS_COLLECTION

logger = logging.getLogger(__name__)


async def ensure_booking_indexes(db):
    """Ensure lookup indexes used by webhook reconciliation.

    Provider order ids are indexed but not unique.
    """

    async def _safe_create(collection, *args, **kwargs):
        try:
            await collection.create_index(*args, **kwargs)
        except OperationFailure as e:  # pragma: no cover
            msg = str(e).lower()
            if (
                "indexoptionsconflict" in msg
                or "indexkeyspecsconflict" in msg
                or "already exists" in msg
            ):
                logger.warning(
                    "[booking_indexes] Keeping existing index for %s (name=%s): %s",
                    collection.name,
                    kwargs.get("name"),
                    msg,
                )
                return
            raise

    col = db[BOOKINGS_COLLECTION]

    await _safe_create(
        col,
        [("providerOrderId", ASCENDING), ("createdAt", DESCENDING)],
        name="bookings_by_provider_order",
    )
    await _safe_create(
        col,
        [("orderId", ASCENDING)],
        name="bookings_by_legacy_order",
        sparse=True,
    )
    await _safe_create(
        col,
        [("userId", ASCENDING), ("createdAt", DESCENDING)],
        name="bookings_by_user",
    )
