"""Bill payment providers.

A provider verifies the customer a bill is for and then executes the
payment. Airtime and data go to Reloadly when it is configured; every
other service type uses the simulated biller until a real integration
exists for it.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from banqa.core.config import get_settings
from banqa.core.exceptions import ProviderError
from banqa.models.service import BillService
from banqa.providers.reloadly import ReloadlyClient, get_reloadly_client

logger = logging.getLogger(__name__)

TELECOM_SERVICE_TYPES = frozenset({"airtime", "data"})


@dataclass(frozen=True)
class CustomerVerification:
    valid: bool
    message: str
    customer_info: dict[str, Any] | None = None
    amount_due: Decimal | None = None


@dataclass(frozen=True)
class ProviderResult:
    success: bool
    message: str
    error: str | None = None
    reference: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def as_metadata(self) -> dict[str, Any]:
        """JSON-safe form stored on the transaction as ``payment_result``."""
        return {
            "success": self.success,
            "message": self.message,
            "error": self.error,
            "reference": self.reference,
        }


class BillProvider(Protocol):
    async def verify_customer(
        self,
        service: BillService,
        customer_data: dict[str, Any],
    ) -> CustomerVerification:
        ...

    async def pay(
        self,
        service: BillService,
        customer_data: dict[str, Any],
        amount: Decimal,
        reference: str,
    ) -> ProviderResult:
        ...


class SimulatedBillProvider:
    """Stand-in biller with configurable success rates.

    Pass a seeded ``random.Random`` (or rates of 0/1) for deterministic
    behaviour in tests.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        success_rate: float = 0.9,
        verification_rate: float = 0.95,
        delay: float = 0.0,
    ) -> None:
        self.rng = rng or random.Random()
        self.success_rate = success_rate
        self.verification_rate = verification_rate
        self.delay = delay

    async def verify_customer(
        self,
        service: BillService,
        customer_data: dict[str, Any],
    ) -> CustomerVerification:
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.rng.random() >= self.verification_rate:
            return CustomerVerification(
                valid=False,
                message="Customer information not found or invalid",
            )

        return CustomerVerification(
            valid=True,
            message="Customer information verified successfully",
            customer_info={
                "name": customer_data.get("customer_name", "John Doe"),
                "address": "123 Main Street, Lagos",
                "account_status": "Active",
            },
            amount_due=Decimal(self.rng.randint(1000, 50999)),
        )

    async def pay(
        self,
        service: BillService,
        customer_data: dict[str, Any],
        amount: Decimal,
        reference: str,
    ) -> ProviderResult:
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.rng.random() < self.success_rate:
            return ProviderResult(
                success=True,
                message="Payment processed successfully",
                reference=f"PAY{int(time.time() * 1000)}",
            )
        return ProviderResult(
            success=False,
            message="Payment failed",
            error="Provider service unavailable",
        )


class ReloadlyBillProvider:
    """Airtime and data payments through Reloadly top-ups."""

    def __init__(self, client: ReloadlyClient, country_code: str = "NG") -> None:
        self.client = client
        self.country_code = country_code

    async def verify_customer(
        self,
        service: BillService,
        customer_data: dict[str, Any],
    ) -> CustomerVerification:
        phone_number = str(customer_data.get("phone_number", "")).strip()
        country_code = customer_data.get("country_code") or self.country_code
        try:
            operator = await self.client.detect_operator(phone_number, country_code)
        except ProviderError as e:
            return CustomerVerification(valid=False, message=e.message)

        return CustomerVerification(
            valid=True,
            message="Customer information verified successfully",
            customer_info={
                "phone_number": phone_number,
                "operator": operator.get("name"),
                "operator_id": operator.get("operatorId") or operator.get("id"),
            },
        )

    async def pay(
        self,
        service: BillService,
        customer_data: dict[str, Any],
        amount: Decimal,
        reference: str,
    ) -> ProviderResult:
        phone_number = str(customer_data.get("phone_number") or "").strip()
        if not phone_number:
            raise ProviderError("Reloadly", "Phone number is required for top-up")
        country_code = customer_data.get("country_code") or self.country_code
        operator_id = customer_data.get("operator_id")
        if not operator_id:
            operator = await self.client.detect_operator(phone_number, country_code)
            operator_id = operator.get("operatorId") or operator.get("id")
        try:
            operator_id = int(operator_id)
        except (TypeError, ValueError):
            raise ProviderError("Reloadly", "Could not determine the mobile operator")

        response = await self.client.topup(
            operator_id=operator_id,
            amount=amount,
            phone_number=phone_number,
            country_code=country_code,
            reference=reference,
        )
        logger.info("Reloadly %s top-up %s accepted", service.service_type, reference)
        return ProviderResult(
            success=True,
            message="Payment processed successfully",
            reference=str(response.get("transactionId", "")) or None,
            data={"status": response.get("status")},
        )


def get_bill_provider(service_type: str) -> BillProvider:
    if service_type in TELECOM_SERVICE_TYPES and get_settings().reloadly_configured:
        return ReloadlyBillProvider(get_reloadly_client())
    return SimulatedBillProvider()
