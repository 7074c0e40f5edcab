"""Flutterwave checkout support: descriptor building and callback verification."""

import logging
from typing import Any

from banqa.core.config import get_settings
from banqa.core.exceptions import ProviderError
from banqa.providers.http import JsonHttpClient

logger = logging.getLogger(__name__)


class FlutterwaveClient(JsonHttpClient):
    """Server-side half of the hosted checkout flow.

    The checkout widget runs in the browser with the public key; the
    server only verifies the transaction id the widget reports back.
    """

    provider_name = "Flutterwave"

    def __init__(
        self,
        public_key: str,
        secret_key: str,
        base_url: str = "https://api.flutterwave.com/v3",
        timeout: int = 30,
    ) -> None:
        super().__init__(timeout=timeout)
        self.public_key = public_key
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")

        if not self.secret_key:
            logger.warning("FLUTTERWAVE_SECRET_KEY not configured - top-up confirmation will fail")

    @classmethod
    def from_settings(cls) -> "FlutterwaveClient":
        settings = get_settings()
        return cls(
            public_key=settings.FLUTTERWAVE_PUBLIC_KEY,
            secret_key=settings.FLUTTERWAVE_SECRET_KEY,
            base_url=settings.FLUTTERWAVE_BASE_URL,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )

    async def verify_transaction(self, transaction_id: str) -> dict[str, Any]:
        """Fetch the authoritative record of a checkout transaction.

        Returns:
            dict: The ``data`` object (status, tx_ref, amount, currency, ...)

        Raises:
            ProviderError: If the lookup fails or the response has no data
        """
        status, payload = await self._send(
            "GET",
            f"{self.base_url}/transactions/{transaction_id}/verify",
            headers={"Authorization": f"Bearer {self.secret_key}"},
        )
        if status != 200 or not isinstance(payload, dict) or payload.get("status") != "success":
            message = self._error_message(payload, f"verification failed with HTTP {status}")
            logger.error("Flutterwave verification of %s failed: %s", transaction_id, message)
            raise ProviderError(self.provider_name, f"Payment verification failed: {message}")
        return payload.get("data") or {}
