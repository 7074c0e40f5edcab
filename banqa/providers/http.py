"""Shared aiohttp plumbing for provider clients."""

import asyncio
import logging
from typing import Any

import aiohttp

from banqa.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


class JsonHttpClient:
    """Base class for JSON APIs called over HTTPS.

    There is no retry: a failed provider call is reported to the caller,
    who decides whether the user should resubmit.
    """

    provider_name = "provider"

    def __init__(self, timeout: int = 30) -> None:
        self.timeout = timeout

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        json: Any = None,
    ) -> tuple[int, Any]:
        """Perform one request and return ``(status, decoded body)``.

        Raises:
            ProviderError: On connection errors and timeouts
        """
        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method,
                    url,
                    headers=headers,
                    json=json,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        payload = {"message": await response.text()}
                    return response.status, payload
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("%s request %s %s failed: %s", self.provider_name, method, url, e)
            raise ProviderError(self.provider_name, f"{self.provider_name} is unreachable")

    @staticmethod
    def _error_message(payload: Any, default: str) -> str:
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return default
