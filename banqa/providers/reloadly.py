"""Reloadly airtime/data top-up client.

Reloadly uses the OAuth client-credentials grant. Tokens are cached in the
client instance until shortly before they expire, so a burst of top-ups
does a single token exchange.
"""

import asyncio
import logging
import time
from decimal import Decimal
from typing import Any

from banqa.core.config import get_settings
from banqa.core.exceptions import ProviderError
from banqa.providers.http import JsonHttpClient

logger = logging.getLogger(__name__)

TOPUPS_ACCEPT = "application/com.reloadly.topups-v1+json"
# Refresh this many seconds before the provider-reported expiry
TOKEN_EXPIRY_MARGIN = 60


class ReloadlyClient(JsonHttpClient):
    provider_name = "Reloadly"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        auth_url: str = "https://auth.reloadly.com/oauth/token",
        base_url: str = "https://topups.reloadly.com",
        timeout: int = 30,
    ) -> None:
        super().__init__(timeout=timeout)
        self.client_id = client_id
        self.client_secret = client_secret
        self.auth_url = auth_url
        self.base_url = base_url.rstrip("/")
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls) -> "ReloadlyClient":
        settings = get_settings()
        return cls(
            client_id=settings.RELOADLY_CLIENT_ID,
            client_secret=settings.RELOADLY_CLIENT_SECRET,
            auth_url=settings.RELOADLY_AUTH_URL,
            base_url=settings.RELOADLY_BASE_URL,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )

    async def get_access_token(self) -> str:
        """Return a valid bearer token, exchanging credentials when needed.

        Raises:
            ProviderError: If credentials are missing or the exchange fails
        """
        async with self._token_lock:
            if self._access_token and time.monotonic() < self._token_expires_at:
                return self._access_token

            if not self.client_id or not self.client_secret:
                raise ProviderError(self.provider_name, "Reloadly credentials not configured")

            status, payload = await self._send(
                "POST",
                self.auth_url,
                headers={"Content-Type": "application/json"},
                json={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                    "audience": self.base_url,
                },
            )
            if status != 200 or not isinstance(payload, dict) or not payload.get("access_token"):
                logger.error("Reloadly auth error: HTTP %s", status)
                raise ProviderError(self.provider_name, f"Authentication failed: {status}")

            self._access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 0))
            self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
            logger.info("Reloadly token refreshed, valid for %ss", expires_in)
            return self._access_token

    async def _authorized(
        self,
        method: str,
        path: str,
        failure: str,
        json: Any = None,
    ) -> Any:
        token = await self.get_access_token()
        status, payload = await self._send(
            method,
            f"{self.base_url}{path}",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": TOPUPS_ACCEPT,
                "Content-Type": "application/json",
            },
            json=json,
        )
        if status >= 400:
            message = self._error_message(payload, "Unknown error")
            logger.error("Reloadly %s %s failed: HTTP %s %s", method, path, status, message)
            raise ProviderError(self.provider_name, f"{failure}: {message}")
        return payload

    async def get_operators(self, country_code: str) -> list[dict[str, Any]]:
        return await self._authorized(
            "GET",
            f"/operators/countries/{country_code.upper()}",
            "Failed to fetch operators",
        )

    async def detect_operator(self, phone_number: str, country_code: str = "NG") -> dict[str, Any]:
        return await self._authorized(
            "GET",
            f"/operators/auto-detect/phone/{phone_number}/countries/{country_code.upper()}",
            "Failed to detect operator",
        )

    async def topup(
        self,
        operator_id: int,
        amount: Decimal,
        phone_number: str,
        country_code: str,
        reference: str,
    ) -> dict[str, Any]:
        """Submit an airtime or data top-up in the operator's local currency."""
        return await self._authorized(
            "POST",
            "/topups",
            "Airtime topup failed",
            json={
                "operatorId": operator_id,
                "amount": float(amount),
                "useLocalAmount": True,
                "customIdentifier": reference,
                "recipientPhone": {
                    "countryCode": country_code.upper(),
                    "number": phone_number,
                },
            },
        )


_client: ReloadlyClient | None = None


def get_reloadly_client() -> ReloadlyClient:
    """Process-wide client so the cached token is shared between requests."""
    global _client
    if _client is None:
        _client = ReloadlyClient.from_settings()
    return _client
