from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from shelterpay.config import BOOKINGS_COLLECTION
from shelterpay.errors import StoreError
from shelterpay.repositories.base_repository import get_collection
from shelterpay.utils import parse_object_id

logger = logging.getLogger(__name__)


def _order_id_candidates(order_id: Any) -> List[Any]:
    # Paymob sends numeric ids; stored values may be int or str.
    values: List[Any] = [order_id]
    if isinstance(order_id, int) and not isinstance(order_id, bool):
        values.append(str(order_id))
    elif isinstance(order_id, str) and order_id.isdigit():
        values.append(int(order_id))
    return values


class BookingRepository:
    """Document-store access for the `bookings` collection.

    Every driver failure is re-raised as StoreError so that routers only deal
    with the application error taxonomy.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, BOOKINGS_COLLECTION)

    async def create(self, doc: Dict[str, Any]) -> str:
        try:
            res = await self._col.insert_one(dict(doc))
        except PyMongoError as exc:
            raise StoreError("create", str(exc)) from exc
        return str(res.inserted_id)

    async def get_by_id(self, booking_id: Any) -> Optional[Dict[str, Any]]:
        oid = parse_object_id(booking_id)
        if oid is None:
            return None
        try:
            return await self._col.find_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreError("get", str(exc)) from exc

    async def find_by_provider_order_id(self, order_id: Any) -> Optional[Dict[str, Any]]:
        """Return the newest booking whose provider order id equals `order_id`.

        Matches `providerOrderId` and the legacy `orderId` field. Uniqueness is
        not enforced by the store; extra matches are logged.
        """

        values = _order_id_candidates(order_id)
        flt = {
            "$or": [
                {"providerOrderId": {"$in": values}},
                {"orderId": {"$in": values}},
            ]
        }
        try:
            cursor = self._col.find(flt).sort("createdAt", DESCENDING).limit(2)
            docs = await cursor.to_list(2)
        except PyMongoError as exc:
            raise StoreError("query", str(exc)) from exc

        if not docs:
            return None
        if len(docs) > 1:
            logger.warning(
                "Multiple bookings share provider order id %s; using newest %s",
                order_id,
                docs[0].get("_id"),
            )
        return docs[0]

    async def merge_update(self, booking_id: Any, fields: Dict[str, Any]) -> None:
        """Set `fields` on the booking without touching other fields."""

        oid = parse_object_id(booking_id)
        if oid is None:
            raise StoreError("update", f"invalid booking id {booking_id!r}")
        try:
            await self._col.update_one({"_id": oid}, {"$set": dict(fields)})
        except PyMongoError as exc:
            raise StoreError("update", str(exc)) from exc
