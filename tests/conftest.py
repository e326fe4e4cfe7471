"""Shared test configuration and fixtures.

Key principles:
- All HTTP calls go through the local ASGI app via httpx.AsyncClient.
- Each test gets its own in-memory Motor-compatible database.
- Paymob is mocked at the HTTP layer with respx.
- AnyIO is the single async runner via pytest-anyio (@pytest.mark.anyio).
"""

from typing import Any, AsyncGenerator, Dict

import json
import sys
import uuid
from pathlib import Path

import httpx
import pytest
import respx
from httpx import ASGITransport
from mongomock_motor import AsyncMongoMockClient

# Ensure project root is on sys.path so that `server` module is importable
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from server import app
from shelterpay.db import get_db
from shelterpay.repositories.booking_repository import BookingRepository
from shelterpay.services.payments_provider.paymob import PaymobClient, get_payment_provider


PAYMOB_TEST_BASE_URL = "https://paymob.test/api"
PAYMOB_TEST_IFRAME_BASE_URL = "https://paymob.test/api/acceptance/iframes"
PAYMOB_TEST_IFRAME_ID = "777"
PAYMOB_TEST_ORDER_ID = 999


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force pytest-anyio to use asyncio event loop."""

    return "asyncio"


@pytest.fixture(scope="session")
def motor_client() -> AsyncMongoMockClient:
    return AsyncMongoMockClient()


@pytest.fixture(scope="function")
async def test_db(motor_client: AsyncMongoMockClient) -> AsyncGenerator[Any, None]:
    """Function-scoped isolated database for each test."""

    db_name = f"shelterpay_test_{uuid.uuid4().hex}"
    db = motor_client[db_name]
    try:
        yield db
    finally:
        await motor_client.drop_database(db_name)


@pytest.fixture
def booking_repo(test_db) -> BookingRepository:
    return BookingRepository(test_db)


@pytest.fixture
def paymob() -> PaymobClient:
    return PaymobClient(
        base_url=PAYMOB_TEST_BASE_URL,
        api_key="test-api-key",
        integration_id="4242",
        iframe_id=PAYMOB_TEST_IFRAME_ID,
        iframe_base_url=PAYMOB_TEST_IFRAME_BASE_URL,
        timeout=5,
    )


@pytest.fixture
def paymob_api() -> respx.MockRouter:
    """Paymob Accept happy path; tests override individual routes as needed."""

    with respx.mock(base_url=PAYMOB_TEST_BASE_URL, assert_all_called=False) as router:
        router.post("/auth/tokens", name="auth").respond(200, json={"token": "auth-token-1"})
        router.post("/ecommerce/orders", name="order").respond(200, json={"id": PAYMOB_TEST_ORDER_ID})
        router.post("/acceptance/payment_keys", name="payment_key").respond(200, json={"token": "pay-token-1"})
        yield router


def request_json(route: respx.Route) -> Dict[str, Any]:
    return json.loads(route.calls.last.request.content)


@pytest.fixture(scope="function")
async def app_with_overrides(test_db, paymob) -> AsyncGenerator[Any, None]:
    """FastAPI app whose store and provider dependencies point at test doubles."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_provider] = lambda: paymob
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(app_with_overrides) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = ASGITransport(app=app_with_overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=30.0) as client:
        yield client


@pytest.fixture
def session_payload() -> Dict[str, Any]:
    return {
        "userId": "user_1",
        "shelterId": "shelter_1",
        "amount": 500,
        "userData": {
            "firstName": "Mona",
            "lastName": "Adel",
            "email": "mona@example.com",
            "phone": "+201000000000",
        },
        "bookingData": {
            "location": "Cairo",
            "fromDate": "2026-01-10T00:00:00Z",
            "toDate": "2026-01-12T00:00:00Z",
            "nights": 2,
            "petCount": 1,
            "petIds": ["pet_1"],
        },
    }
