"""Unit tests for the HTTP API client."""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from banqa.client.api_client import ApiError, BanqaApiClient
from banqa.core.exceptions import ProviderError


@pytest.fixture
def client() -> BanqaApiClient:
    return BanqaApiClient("https://api.banqa.test/", access_token="token-123")


class TestCall:
    @pytest.mark.asyncio
    async def test_request_is_authorized_and_prefixed(self, client) -> None:
        with patch.object(client, "_send", AsyncMock(return_value=(200, {"success": True}))) as send:
            await client.verify_pin("1234")

        send.assert_awaited_once_with(
            "POST",
            "https://api.banqa.test/api/v1/transfers/verify-pin",
            headers={"Authorization": "Bearer token-123"},
            json={"pin": "1234"},
        )

    @pytest.mark.asyncio
    async def test_error_envelope_becomes_api_error(self, client) -> None:
        body = {"success": False, "error": "Invalid withdrawal PIN", "error_type": "PinVerificationError"}
        with patch.object(client, "_send", AsyncMock(return_value=(400, body))):
            with pytest.raises(ApiError) as exc_info:
                await client.verify_pin("0000")

        assert exc_info.value.message == "Invalid withdrawal PIN"
        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_unsuccessful_body_with_ok_status_is_an_error(self, client) -> None:
        with patch.object(client, "_send", AsyncMock(return_value=(200, {"success": False, "message": "nope"}))):
            with pytest.raises(ApiError, match="nope"):
                await client.get_balances()

    @pytest.mark.asyncio
    async def test_unreachable_server_becomes_api_error(self, client) -> None:
        failure = ProviderError("Banqa API", "Banqa API is unreachable")
        with patch.object(client, "_send", AsyncMock(side_effect=failure)):
            with pytest.raises(ApiError, match="unreachable") as exc_info:
                await client.list_currencies()

        assert exc_info.value.status is None


class TestOperations:
    @pytest.mark.asyncio
    async def test_process_transfer_sends_amounts_as_strings(self, client) -> None:
        with patch.object(client, "_send", AsyncMock(return_value=(200, {"success": True}))) as send:
            await client.process_transfer("abc", Decimal("1000.50"), "NGN", "GHS", None, "req-1")

        assert send.await_args.kwargs["json"] == {
            "recipient_id": "abc",
            "amount": "1000.50",
            "sender_currency": "NGN",
            "recipient_currency": "GHS",
            "description": None,
            "request_id": "req-1",
        }

    @pytest.mark.asyncio
    async def test_find_recipient_unwraps_payload(self, client) -> None:
        payload = {"success": True, "recipient": {"id": "1", "full_name": "Kofi"}}
        with patch.object(client, "_send", AsyncMock(return_value=(200, payload))) as send:
            recipient = await client.find_recipient("BQ87654321")

        assert recipient == {"id": "1", "full_name": "Kofi"}
        assert send.await_args.args[1].endswith("/transfers/recipients/BQ87654321")

    @pytest.mark.asyncio
    async def test_pay_bill_generates_reference_when_absent(self, client) -> None:
        with patch.object(client, "_send", AsyncMock(return_value=(200, {"success": True}))) as send:
            await client.pay_bill("electricity", "IKEDC", Decimal("1500"), {"meter_number": "1"})

        assert send.await_args.kwargs["json"]["reference_id"]
        assert send.await_args.kwargs["json"]["amount"] == "1500"
