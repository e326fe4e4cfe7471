from __future__ import annotations

import pytest
from pymongo.errors import ServerSelectionTimeoutError

import shelterpay.db as db_module
from shelterpay.db import ping_db
from shelterpay.errors import StoreError
from shelterpay.indexes.booking_indexes import ensure_booking_indexes


@pytest.mark.anyio
async def test_deployment_health(async_client):
    resp = await async_client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.headers.get("X-Correlation-Id")


@pytest.mark.anyio
async def test_booking_indexes_are_idempotent(test_db):
    await ensure_booking_indexes(test_db)
    await ensure_booking_indexes(test_db)

    info = await test_db.bookings.index_information()
    assert "bookings_by_provider_order" in info
    assert "bookings_by_legacy_order" in info
    assert "bookings_by_user" in info
    assert not info["bookings_by_provider_order"].get("unique", False)


class _UnreachableDb:
    async def command(self, name):
        raise ServerSelectionTimeoutError("no servers")


@pytest.mark.anyio
async def test_ping_db_reports_unreachable_server():
    assert await ping_db(_UnreachableDb()) is False


@pytest.mark.anyio
async def test_ping_db_reports_reachable_server():
    class _Db:
        async def command(self, name):
            return {"ok": 1.0}

    assert await ping_db(_Db()) is True


@pytest.mark.anyio
async def test_connect_without_mongo_url_is_store_error(monkeypatch):
    monkeypatch.setattr(db_module, "MONGO_URL", "")
    monkeypatch.setattr(db_module, "_db", None)

    with pytest.raises(StoreError):
        await db_module.connect_mongo()
