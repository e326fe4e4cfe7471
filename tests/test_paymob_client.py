from __future__ import annotations

import httpx
import pytest

from shelterpay.errors import UpstreamAuthError, UpstreamOrderError, UpstreamTokenError
from shelterpay.services.payments_provider.base import CustomerInfo

from conftest import PAYMOB_TEST_ORDER_ID, request_json


@pytest.mark.anyio
async def test_authenticate_returns_token_and_sends_api_key(paymob, paymob_api):
    token = await paymob.authenticate()

    assert token == "auth-token-1"
    assert request_json(paymob_api["auth"]) == {"api_key": "test-api-key"}


@pytest.mark.anyio
async def test_authenticate_without_token_raises_auth_error(paymob, paymob_api):
    paymob_api["auth"].respond(200, json={"profile": {}})

    with pytest.raises(UpstreamAuthError):
        await paymob.authenticate()


@pytest.mark.anyio
async def test_authenticate_timeout_raises_auth_error(paymob, paymob_api):
    paymob_api["auth"].side_effect = httpx.ConnectTimeout("boom")

    with pytest.raises(UpstreamAuthError) as exc_info:
        await paymob.authenticate()

    assert "timeout" in exc_info.value.reason


@pytest.mark.anyio
async def test_create_order_sends_merchant_order_id_and_cents(paymob, paymob_api):
    order = await paymob.create_order("auth-token-1", 500.255, "booking-abc")

    assert order.id == PAYMOB_TEST_ORDER_ID
    body = request_json(paymob_api["order"])
    assert body["auth_token"] == "auth-token-1"
    assert body["merchant_order_id"] == "booking-abc"
    assert body["amount_cents"] == 50026
    assert body["currency"] == "EGP"
    assert body["delivery_needed"] is False
    assert body["items"] == []


@pytest.mark.anyio
async def test_create_order_upstream_failure_raises_order_error(paymob, paymob_api):
    paymob_api["order"].respond(422, json={"message": "duplicate"})

    with pytest.raises(UpstreamOrderError) as exc_info:
        await paymob.create_order("auth-token-1", 10, "booking-abc")

    assert exc_info.value.upstream_status == 422
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to initiate payment."


@pytest.mark.anyio
async def test_generate_payment_key_builds_billing_data(paymob, paymob_api):
    customer = CustomerInfo(first_name="Mona", last_name="", email="mona@example.com", phone="0100")

    token = await paymob.generate_payment_key(
        token="auth-token-1",
        amount=500,
        order_id=PAYMOB_TEST_ORDER_ID,
        customer=customer,
    )

    assert token == "pay-token-1"
    body = request_json(paymob_api["payment_key"])
    assert body["order_id"] == PAYMOB_TEST_ORDER_ID
    assert body["amount_cents"] == 50000
    assert body["integration_id"] == 4242
    assert body["expiration"] > 0
    billing = body["billing_data"]
    assert billing["first_name"] == "Mona"
    assert billing["last_name"] == "NA"
    assert billing["phone_number"] == "0100"
    assert billing["city"] == "NA"


@pytest.mark.anyio
async def test_generate_payment_key_non_json_raises_token_error(paymob, paymob_api):
    paymob_api["payment_key"].respond(200, text="<html>oops</html>")

    with pytest.raises(UpstreamTokenError):
        await paymob.generate_payment_key(
            token="auth-token-1",
            amount=1,
            order_id=1,
            customer=CustomerInfo(),
        )


def test_iframe_url_uses_configured_iframe(paymob):
    assert paymob.iframe_url("tok") == "https://paymob.test/api/acceptance/iframes/777?payment_token=tok"
