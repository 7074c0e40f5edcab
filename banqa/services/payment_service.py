"""Wallet top-ups through the Flutterwave hosted checkout."""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.config import get_settings
from banqa.core.context import RequestContext
from banqa.core.exceptions import NotFoundError, ValidationError
from banqa.models.profile import Profile
from banqa.models.transaction import TransactionType
from banqa.providers.flutterwave import FlutterwaveClient
from banqa.services.ledger_service import DEFAULT_CURRENCY, LedgerService, SyncResult

logger = logging.getLogger(__name__)

PAYMENT_OPTIONS = "card, banktransfer, ussd"


@dataclass(frozen=True)
class CheckoutSession:
    reference: str
    payment_data: dict[str, Any]


def checkout_reference(user_id: Any) -> str:
    return f"BQ_{int(time.time() * 1000)}_{str(user_id)[:8]}"


class PaymentService:
    def __init__(
        self,
        ledger: LedgerService | None = None,
        flutterwave: FlutterwaveClient | None = None,
    ) -> None:
        self.ledger = ledger or LedgerService()
        self.flutterwave = flutterwave

    def _client(self) -> FlutterwaveClient:
        if self.flutterwave is None:
            self.flutterwave = FlutterwaveClient.from_settings()
        return self.flutterwave

    async def _get_profile(self, session: AsyncSession, ctx: RequestContext) -> Profile:
        profile = await session.get(Profile, ctx.user_id)
        if profile is None:
            raise NotFoundError(
                "Profile",
                str(ctx.user_id),
                message="Profile not found. Please complete your profile setup.",
            )
        return profile

    async def initialize_payment(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        amount: Decimal,
    ) -> CheckoutSession:
        """Build the descriptor the checkout widget needs to collect ``amount`` NGN."""
        settings = get_settings()
        if amount is None or amount < settings.MIN_TOPUP_AMOUNT:
            raise ValidationError(
                f"Invalid amount. Minimum amount is ₦{settings.MIN_TOPUP_AMOUNT:,}"
            )

        profile = await self._get_profile(session, ctx)
        reference = checkout_reference(ctx.user_id)
        customer: dict[str, Any] = {
            "email": profile.email,
            "name": profile.full_name or "Banqa User",
        }
        if profile.phone_number:
            customer["phone_number"] = profile.phone_number

        payment_data = {
            "public_key": settings.FLUTTERWAVE_PUBLIC_KEY,
            "tx_ref": reference,
            "amount": str(amount),
            "currency": DEFAULT_CURRENCY,
            "payment_options": PAYMENT_OPTIONS,
            "customer": customer,
            "customizations": {
                "title": "Banqa Wallet Top-up",
                "description": f"Add ₦{amount:,} to your Banqa wallet",
                "logo": "https://banqa.app/favicon.ico",
            },
        }
        logger.info("Checkout %s initialised for user %s: %s NGN", reference, ctx.user_id, amount)
        return CheckoutSession(reference=reference, payment_data=payment_data)

    async def confirm_payment(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        transaction_id: str,
    ) -> SyncResult:
        """Verify a completed checkout with Flutterwave and credit the wallet.

        The credit is keyed by the checkout ``tx_ref``, so repeated callbacks
        for the same checkout credit the wallet once.

        Raises:
            ProviderError: Verification request failed
            ValidationError: Payment not successful, wrong currency, or the
                checkout does not belong to the caller
        """
        data = await self._client().verify_transaction(transaction_id)

        if data.get("status") != "successful":
            raise ValidationError("Payment was not successful")
        if data.get("currency") != DEFAULT_CURRENCY:
            raise ValidationError("Unsupported payment currency")

        tx_ref = str(data.get("tx_ref") or "")
        if not tx_ref.startswith("BQ_") or not tx_ref.endswith(f"_{str(ctx.user_id)[:8]}"):
            logger.warning("Checkout %s does not belong to user %s", tx_ref, ctx.user_id)
            raise ValidationError("Payment reference does not match this account")

        try:
            amount = Decimal(str(data.get("amount")))
        except InvalidOperation:
            raise ValidationError("Invalid payment amount")
        if amount <= 0:
            raise ValidationError("Invalid payment amount")

        return await self.ledger.sync_wallet(
            session,
            ctx.user_id,
            amount,
            TransactionType.CREDIT,
            currency=DEFAULT_CURRENCY,
            reference=tx_ref,
            metadata={
                "flutterwave_transaction_id": str(transaction_id),
                "flw_ref": data.get("flw_ref"),
                "payment_type": data.get("payment_type"),
            },
        )
