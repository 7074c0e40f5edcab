"""Bill and service payments (electricity, cable TV, airtime, data, ...).

``pay_bill`` runs in three database transactions so that no row lock is
held while the provider is being called:

1. a ``pending`` bill_payment transaction is committed, keyed by
   ``bill:<user>:<reference_id>``
2. the provider is called outside any database transaction
3. the outcome is settled: on success the wallet is debited with the
   guarded ledger update and the transaction marked ``completed``; on
   failure (or when the debit no longer fits) it is marked ``failed``

A user notification describing the final outcome is written in step 3.
Submitting the same ``reference_id`` again returns the first outcome and
never debits twice.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.context import RequestContext
from banqa.core.exceptions import (
    InsufficientFundsError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from banqa.models.service import BillService
from banqa.models.transaction import Transaction, TransactionStatus, TransactionType
from banqa.providers.billing import BillProvider, ProviderResult, get_bill_provider
from banqa.services.ledger_service import DEFAULT_CURRENCY, LedgerService, generate_reference
from banqa.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceVerification:
    valid: bool
    message: str
    customer_info: dict[str, Any] | None = None
    amount_due: Decimal | None = None


@dataclass(frozen=True)
class BillPaymentResult:
    success: bool
    status: TransactionStatus
    transaction_id: uuid.UUID
    message: str
    replayed: bool = False


def validate_customer_data(
    input_fields: list[dict[str, Any]],
    customer_data: dict[str, Any],
) -> list[str]:
    """Names of required fields that are missing or blank in ``customer_data``."""
    missing = []
    for field in input_fields or []:
        if not field.get("required"):
            continue
        value = customer_data.get(field.get("name"))
        if value is None or not str(value).strip():
            missing.append(field["name"])
    return missing


def _service_config(service: BillService) -> dict[str, Any]:
    return {
        "id": str(service.id),
        "service_type": service.service_type,
        "provider_name": service.provider_name,
        "input_fields": service.input_fields,
    }


class BillPaymentService:
    """Verifies customer input and executes bill payments."""

    def __init__(
        self,
        ledger: LedgerService | None = None,
        notifications: NotificationService | None = None,
        provider_factory: Callable[[str], BillProvider] = get_bill_provider,
    ) -> None:
        self.notifications = notifications or NotificationService()
        self.ledger = ledger or LedgerService(self.notifications)
        self.provider_factory = provider_factory

    async def get_service(
        self,
        session: AsyncSession,
        service_type: str,
        provider_name: str,
    ) -> BillService:
        result = await session.execute(
            select(BillService).where(
                BillService.service_type == service_type,
                BillService.provider_name == provider_name,
                BillService.is_active.is_(True),
            )
        )
        service = result.scalar_one_or_none()
        if service is None:
            raise NotFoundError(
                "Service",
                f"{service_type}/{provider_name}",
                message="Service not available",
            )
        return service

    async def _check_input(
        self,
        session: AsyncSession,
        service_type: str,
        provider_name: str,
        customer_data: dict[str, Any],
    ) -> BillService:
        service = await self.get_service(session, service_type, provider_name)
        missing = validate_customer_data(service.input_fields, customer_data)
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)
        return service

    async def verify_service_input(
        self,
        session: AsyncSession,
        service_type: str,
        provider_name: str,
        customer_data: dict[str, Any],
    ) -> ServiceVerification:
        """Validate customer input and ask the provider who the customer is.

        Raises:
            NotFoundError: No active service for (service_type, provider_name)
            ValidationError: Required inputs missing; ``missing_fields`` lists them
        """
        service = await self._check_input(session, service_type, provider_name, customer_data)
        provider = self.provider_factory(service_type)
        verification = await provider.verify_customer(service, customer_data)
        logger.info(
            "Customer verification for %s/%s: valid=%s",
            service_type, provider_name, verification.valid,
        )
        return ServiceVerification(
            valid=verification.valid,
            message=verification.message,
            customer_info=verification.customer_info,
            amount_due=verification.amount_due,
        )

    async def _replay(
        self,
        session: AsyncSession,
        key: str,
    ) -> BillPaymentResult | None:
        existing = await self.ledger.find_by_idempotency_key(session, key)
        if existing is None:
            return None
        logger.info("Bill payment %s already submitted, replaying", key)
        payment_result = existing.details.get("payment_result") or {}
        if existing.status == TransactionStatus.PENDING:
            message = "Payment is being processed"
        else:
            message = payment_result.get("message") or (
                "Payment successful" if existing.status == TransactionStatus.COMPLETED
                else "Payment failed"
            )
        return BillPaymentResult(
            success=existing.status == TransactionStatus.COMPLETED,
            status=existing.status,
            transaction_id=existing.id,
            message=message,
            replayed=True,
        )

    async def pay_bill(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        service_type: str,
        provider_name: str,
        amount: Decimal,
        customer_data: dict[str, Any],
        reference_id: str | None = None,
    ) -> BillPaymentResult:
        """Pay a bill from the caller's NGN wallet.

        Commits its own database transactions; do not call it inside
        ``session.begin()``.

        Args:
            session: Async database session with no transaction in progress
            ctx: Caller identity
            service_type: e.g. "electricity"
            provider_name: e.g. "IKEDC"
            amount: Amount in NGN
            customer_data: Service inputs such as meter number
            reference_id: Client reference; repeats return the first outcome

        Returns:
            BillPaymentResult: Final status and the transaction id

        Raises:
            ValidationError: Non-positive amount or missing service inputs
            NotFoundError: Wallet or service not found
            InsufficientFundsError: Balance below ``amount`` before submission
        """
        user_id = ctx.user_id
        reference = reference_id or generate_reference("BILL")
        key = f"bill:{user_id}:{reference}"

        replay = await self._replay(session, key)
        if replay is not None:
            return replay

        if amount <= 0:
            raise ValidationError("Please enter a valid amount")

        balance = await self.ledger.get_balance(session, user_id, DEFAULT_CURRENCY)
        if balance is None:
            raise NotFoundError("Wallet", f"{user_id}/{DEFAULT_CURRENCY}", message="Wallet not found")
        if balance < amount:
            raise InsufficientFundsError(
                f"{user_id}/{DEFAULT_CURRENCY}",
                amount,
                balance,
                message="Insufficient wallet balance",
            )

        service = await self._check_input(session, service_type, provider_name, customer_data)

        transaction = Transaction(
            user_id=user_id,
            transaction_type=TransactionType.BILL_PAYMENT,
            amount=amount,
            currency=DEFAULT_CURRENCY,
            status=TransactionStatus.PENDING,
            reference_number=reference,
            description=f"{service_type} bill payment to {provider_name}",
            service_type=service_type,
            provider_name=provider_name,
            details={
                "customer_data": customer_data,
                "service_config": _service_config(service),
            },
            idempotency_key=key,
        )
        session.add(transaction)
        try:
            await session.commit()
        except IntegrityError:
            # A concurrent submission with the same reference won the insert.
            await session.rollback()
            replay = await self._replay(session, key)
            if replay is None:
                raise
            return replay

        provider = self.provider_factory(service_type)
        try:
            result = await provider.pay(service, customer_data, amount, reference)
        except ProviderError as e:
            logger.error("Provider %s failed for bill payment %s: %s", e.provider, reference, e.message)
            result = ProviderResult(success=False, message="Payment failed", error=e.message)
        except Exception:
            # The pending row is committed; it must still be settled
            logger.exception("Unexpected provider error for bill payment %s", reference)
            result = ProviderResult(
                success=False,
                message="Payment failed",
                error="Provider service unavailable",
            )

        return await self._settle(session, transaction, result, service_type, provider_name)

    async def _settle(
        self,
        session: AsyncSession,
        transaction: Transaction,
        result: ProviderResult,
        service_type: str,
        provider_name: str,
    ) -> BillPaymentResult:
        status = TransactionStatus.COMPLETED if result.success else TransactionStatus.FAILED
        if result.success:
            try:
                await self.ledger.apply_balance_change(
                    session,
                    transaction.user_id,
                    DEFAULT_CURRENCY,
                    -transaction.amount,
                    insufficient_message="Insufficient wallet balance",
                )
            except (InsufficientFundsError, NotFoundError) as e:
                logger.error(
                    "Provider accepted bill payment %s but the debit failed: %s",
                    transaction.reference_number, e.message,
                )
                status = TransactionStatus.FAILED
                result = ProviderResult(
                    success=False,
                    message="Payment failed",
                    error=e.message,
                    reference=result.reference,
                )

        transaction.status = status
        transaction.details = {**transaction.details, "payment_result": result.as_metadata()}

        amount = f"₦{transaction.amount:,.2f}"
        if status == TransactionStatus.COMPLETED:
            await self.notifications.notify(
                session,
                transaction.user_id,
                title="Payment Successful",
                body=f"Your {service_type} bill payment of {amount} to {provider_name} was successful.",
                details={"transaction_id": str(transaction.id)},
            )
        else:
            await self.notifications.notify(
                session,
                transaction.user_id,
                title="Payment Failed",
                body=(
                    f"Your {service_type} bill payment of {amount} to {provider_name} failed. "
                    f"{result.error or ''}"
                ).strip(),
                details={"transaction_id": str(transaction.id)},
            )
        await session.commit()

        logger.info("Bill payment %s settled as %s", transaction.reference_number, status.value)
        return BillPaymentResult(
            success=status == TransactionStatus.COMPLETED,
            status=status,
            transaction_id=transaction.id,
            message=result.message or (
                "Payment successful" if status == TransactionStatus.COMPLETED else "Payment failed"
            ),
        )
