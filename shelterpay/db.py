from __future__ import annotations

"""Process-wide Motor handle for the bookings store.

`connect_mongo` runs at startup; routes receive the database through the
`get_db` dependency so tests can swap it for an in-memory one.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from shelterpay.config import DB_NAME, MONGO_SERVER_SELECTION_TIMEOUT_MS, MONGO_URL
from shelterpay.errors import StoreError

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


async def connect_mongo() -> AsyncIOMotorDatabase:
    global _client, _db

    if _db is not None:
        return _db
    if not MONGO_URL:
        raise StoreError("connect", "MONGO_URL is not set")

    # tz_aware so stored UTC timestamps come back comparable with now_utc()
    _client = AsyncIOMotorClient(
        MONGO_URL,
        serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS,
        tz_aware=True,
    )
    _db = _client[DB_NAME]
    logger.info("MongoDB client ready (db=%s)", DB_NAME)
    return _db


async def close_mongo() -> None:
    global _client, _db

    if _client is not None:
        _client.close()
        logger.info("MongoDB client closed")
    _client = None
    _db = None


async def get_db() -> AsyncIOMotorDatabase:
    if _db is not None:
        return _db
    return await connect_mongo()


async def ping_db(db: AsyncIOMotorDatabase) -> bool:
    """True when the server answers `ping`; failures are logged, not raised."""

    try:
        await db.command("ping")
    except PyMongoError:
        logger.warning("MongoDB ping failed", exc_info=True)
        return False
    return True
