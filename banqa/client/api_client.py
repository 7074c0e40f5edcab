"""Async client for the Banqa HTTP API."""

import logging
import uuid
from decimal import Decimal
from typing import Any

from banqa.core.exceptions import ProviderError
from banqa.providers.http import JsonHttpClient

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A remote call failed; ``message`` is the server's wording, verbatim."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.message = message
        self.status = status
        super().__init__(message)


class BanqaApiClient(JsonHttpClient):
    """One method per remote operation, authenticated with a bearer token.

    Calls are never retried. Transfers and bill payments accept a
    client-generated id so a retry by the caller cannot apply twice.
    """

    provider_name = "Banqa API"

    def __init__(self, base_url: str, access_token: str, timeout: int = 30) -> None:
        super().__init__(timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token

    async def _call(self, method: str, path: str, json: Any = None) -> dict[str, Any]:
        try:
            status, payload = await self._send(
                method,
                f"{self.base_url}/api/v1{path}",
                headers={"Authorization": f"Bearer {self.access_token}"},
                json=json,
            )
        except ProviderError as e:
            raise ApiError(e.message)

        if not isinstance(payload, dict):
            payload = {"data": payload}
        if status >= 400 or payload.get("success") is False:
            message = payload.get("error") or payload.get("message") or f"Request failed with HTTP {status}"
            logger.info("%s %s failed: HTTP %s %s", method, path, status, message)
            raise ApiError(str(message), status=status)
        return payload

    async def initialize_payment(self, amount: Decimal) -> dict[str, Any]:
        return await self._call("POST", "/payments/initialize", {"amount": str(amount)})

    async def confirm_payment(self, transaction_id: str) -> dict[str, Any]:
        return await self._call("POST", "/payments/confirm", {"transaction_id": transaction_id})

    async def sync_wallet(
        self,
        amount: Decimal,
        transaction_type: str,
        user_id: str | None = None,
        currency: str = "NGN",
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self._call("POST", "/wallet/sync", {
            "user_id": user_id,
            "amount": str(amount),
            "transaction_type": transaction_type,
            "currency": currency,
            "reference": reference,
            "metadata": metadata,
        })

    async def get_balances(self) -> list[dict[str, Any]]:
        return (await self._call("GET", "/wallet/balances"))["wallets"]

    async def list_currencies(self) -> list[dict[str, Any]]:
        return (await self._call("GET", "/transfers/currencies"))["currencies"]

    async def find_recipient(self, recipient_code: str) -> dict[str, Any]:
        return (await self._call("GET", f"/transfers/recipients/{recipient_code}"))["recipient"]

    async def verify_pin(self, pin: str) -> None:
        await self._call("POST", "/transfers/verify-pin", {"pin": pin})

    async def process_transfer(
        self,
        recipient_id: uuid.UUID | str,
        amount: Decimal,
        sender_currency: str,
        recipient_currency: str,
        description: str | None,
        request_id: str,
    ) -> dict[str, Any]:
        return await self._call("POST", "/transfers", {
            "recipient_id": str(recipient_id),
            "amount": str(amount),
            "sender_currency": sender_currency,
            "recipient_currency": recipient_currency,
            "description": description,
            "request_id": request_id,
        })

    async def process_withdrawal(
        self,
        action: str,
        amount: Decimal,
        bank_account_id: uuid.UUID | str,
        pin: str | None = None,
        otp_code: str | None = None,
    ) -> dict[str, Any]:
        return await self._call("POST", "/withdrawals", {
            "action": action,
            "amount": str(amount),
            "bank_account_id": str(bank_account_id),
            "pin": pin,
            "otp_code": otp_code,
        })

    async def verify_service_input(
        self,
        service_type: str,
        provider_name: str,
        customer_data: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._call("POST", "/bills/verify", {
            "service_type": service_type,
            "provider_name": provider_name,
            "customer_data": customer_data,
        })

    async def pay_bill(
        self,
        service_type: str,
        provider_name: str,
        amount: Decimal,
        customer_data: dict[str, Any],
        reference_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._call("POST", "/bills/pay", {
            "service_type": service_type,
            "provider_name": provider_name,
            "amount": str(amount),
            "customer_data": customer_data,
            "reference_id": reference_id or uuid.uuid4().hex,
        })

    async def list_bank_accounts(self) -> list[dict[str, Any]]:
        return (await self._call("GET", "/bank-accounts"))["accounts"]

    async def send_notification(
        self,
        user_id: uuid.UUID | str,
        title: str,
        body: str,
        type: str = "system",
    ) -> dict[str, Any]:
        return await self._call("POST", "/notifications", {
            "user_id": str(user_id),
            "title": title,
            "body": body,
            "type": type,
        })
