"""Peer-to-peer and cross-border money transfers.

A transfer moves ``amount`` plus a fee out of the sender's wallet and
credits the converted amount to the recipient's wallet in the recipient's
currency. Pricing lives in ``banqa.core.pricing``.

Both legs, the MoneyTransfer row, both Transaction rows and both
notifications are written in the caller's database transaction. Wallet rows
are updated in user-id order so that two opposite transfers between the same
pair of users cannot deadlock.
"""

import logging
import secrets
import string
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.config import get_settings
from banqa.core.context import RequestContext
from banqa.core.exceptions import NotFoundError, ValidationError
from banqa.core.pricing import TransferQuote, normalize_recipient_code, quote_transfer
from banqa.models.currency import Currency
from banqa.models.profile import Profile
from banqa.models.transaction import Transaction, TransactionStatus, TransactionType
from banqa.models.transfer import MoneyTransfer
from banqa.services.ledger_service import LedgerService
from banqa.services.notification_service import NotificationService
from banqa.services.withdrawal_service import WithdrawalService

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Banqa Cross-Border"


def generate_transfer_reference() -> str:
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(9))
    return f"CBT{int(time.time() * 1000)}{suffix}"


@dataclass(frozen=True)
class TransferResult:
    transfer_id: uuid.UUID
    reference_number: str
    recipient_name: str
    amount_sent: Decimal
    amount_received: Decimal
    exchange_rate: Decimal
    transfer_fee: Decimal
    total_deducted: Decimal
    sender_currency: str
    recipient_currency: str
    is_cross_border: bool
    message: str
    replayed: bool = False


class TransferService:
    """Recipient lookup, quoting and execution of money transfers."""

    def __init__(
        self,
        ledger: LedgerService | None = None,
        notifications: NotificationService | None = None,
        withdrawals: WithdrawalService | None = None,
    ) -> None:
        self.notifications = notifications or NotificationService()
        self.ledger = ledger or LedgerService(self.notifications)
        self.withdrawals = withdrawals or WithdrawalService(self.ledger, self.notifications)

    async def find_recipient(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        recipient_code: str,
    ) -> Profile:
        """Resolve a recipient identifier to an active profile other than the caller.

        Raises:
            ValidationError: Malformed identifier, or the caller's own identifier
            NotFoundError: No active user carries the identifier
        """
        code = normalize_recipient_code(recipient_code)
        result = await session.execute(
            select(Profile).where(Profile.recipient_code == code, Profile.is_active.is_(True))
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile", code, message="No user found with this Banqa ID")
        if profile.id == ctx.user_id:
            raise ValidationError("You cannot send money to yourself")
        return profile

    async def list_active_currencies(self, session: AsyncSession) -> list[Currency]:
        result = await session.execute(
            select(Currency).where(Currency.is_active.is_(True)).order_by(Currency.country)
        )
        return list(result.scalars().all())

    async def _get_currency(self, session: AsyncSession, code: str) -> Currency:
        currency = await session.get(Currency, code.upper())
        if currency is None or not currency.is_active:
            raise ValidationError("Invalid currency codes for cross-border transfer")
        return currency

    def validate_amount(self, amount: Decimal) -> None:
        settings = get_settings()
        if amount <= Decimal("0"):
            raise ValidationError("Please enter a valid amount")
        if amount < settings.MIN_TRANSFER_AMOUNT:
            raise ValidationError(f"Minimum transfer amount is ₦{settings.MIN_TRANSFER_AMOUNT:,}")
        if amount > settings.MAX_TRANSFER_AMOUNT:
            raise ValidationError(f"Maximum transfer amount is ₦{settings.MAX_TRANSFER_AMOUNT:,}")

    async def quote(
        self,
        session: AsyncSession,
        amount: Decimal,
        sender_currency: str,
        recipient_currency: str,
    ) -> TransferQuote:
        sender = await self._get_currency(session, sender_currency)
        recipient = await self._get_currency(session, recipient_currency)
        return quote_transfer(amount, sender, recipient, get_settings().TRANSFER_FEE_RATE)

    async def verify_pin(self, session: AsyncSession, ctx: RequestContext, pin: str) -> None:
        await self.withdrawals.verify_pin(session, ctx.user_id, pin)

    async def _find_by_request_id(
        self,
        session: AsyncSession,
        sender_id: uuid.UUID,
        request_id: str,
    ) -> MoneyTransfer | None:
        result = await session.execute(
            select(MoneyTransfer).where(
                MoneyTransfer.sender_id == sender_id,
                MoneyTransfer.request_id == request_id,
            )
        )
        return result.scalar_one_or_none()

    async def replay_transfer(
        self,
        session: AsyncSession,
        sender_id: uuid.UUID,
        request_id: str,
    ) -> TransferResult | None:
        """Result of a transfer already made under ``request_id``, if any."""
        existing = await self._find_by_request_id(session, sender_id, request_id)
        if existing is None:
            return None
        logger.info("Transfer request %s already processed, replaying", request_id)
        recipient = await session.get(Profile, existing.recipient_id)
        return TransferResult(
            transfer_id=existing.id,
            reference_number=existing.reference_number,
            recipient_name=recipient.full_name if recipient else "",
            amount_sent=existing.amount_sent,
            amount_received=existing.amount_received,
            exchange_rate=existing.exchange_rate,
            transfer_fee=existing.transfer_fee,
            total_deducted=existing.amount_sent + existing.transfer_fee,
            sender_currency=existing.sender_currency,
            recipient_currency=existing.recipient_currency,
            is_cross_border=existing.sender_currency != existing.recipient_currency,
            message="Money transfer already processed",
            replayed=True,
        )

    async def process_transfer(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        recipient_id: uuid.UUID,
        amount: Decimal,
        sender_currency: str = "NGN",
        recipient_currency: str = "NGN",
        description: str | None = None,
        request_id: str | None = None,
    ) -> TransferResult:
        """Debit the caller and credit the recipient as one logical operation.

        Args:
            session: Active async database session (transaction managed by caller)
            ctx: Caller identity; the caller is the sender
            recipient_id: Profile id of the recipient
            amount: Amount in the sender's currency
            sender_currency: Currency of the wallet debited
            recipient_currency: Currency of the wallet credited
            description: Optional note stored on the transfer
            request_id: Client-generated id; repeating it returns the original transfer

        Returns:
            TransferResult: Amounts, fee, reference and recipient name

        Raises:
            ValidationError: Bad amount, self-transfer or inactive currency
            NotFoundError: Recipient or sender wallet does not exist
            InsufficientFundsError: Sender balance below amount + fee
        """
        sender_id = ctx.user_id
        self.validate_amount(amount)
        if recipient_id == sender_id:
            raise ValidationError("You cannot send money to yourself")

        if request_id:
            replay = await self.replay_transfer(session, sender_id, request_id)
            if replay is not None:
                return replay

        recipient = await session.get(Profile, recipient_id)
        if recipient is None or not recipient.is_active:
            raise NotFoundError("Profile", str(recipient_id), message="Recipient not found")

        sender_cur = await self._get_currency(session, sender_currency)
        recipient_cur = await self._get_currency(session, recipient_currency)
        quote = quote_transfer(amount, sender_cur, recipient_cur, get_settings().TRANSFER_FEE_RATE)

        await self.ledger.get_or_create_wallet(session, recipient_id, recipient_cur.code)

        legs = sorted(
            [
                (sender_id, sender_cur.code, -quote.total_deducted),
                (recipient_id, recipient_cur.code, quote.converted_amount),
            ],
            key=lambda leg: str(leg[0]),
        )
        for user_id, currency, delta in legs:
            await self.ledger.apply_balance_change(
                session,
                user_id,
                currency,
                delta,
                insufficient_message="Insufficient balance for cross-border transfer",
                missing_message="Sender wallet not found",
            )

        reference = generate_transfer_reference()
        if not description:
            description = (
                f"Cross-border transfer from {sender_cur.country} to {recipient_cur.country}"
                if quote.is_cross_border else "Money transfer"
            )
        transfer = MoneyTransfer(
            sender_id=sender_id,
            recipient_id=recipient_id,
            sender_currency=sender_cur.code,
            recipient_currency=recipient_cur.code,
            amount_sent=amount,
            amount_received=quote.converted_amount,
            exchange_rate=quote.exchange_rate,
            transfer_fee=quote.transfer_fee,
            status=TransactionStatus.COMPLETED,
            reference_number=reference,
            request_id=request_id,
            description=description,
            processed_at=datetime.now(timezone.utc),
        )
        session.add(transfer)
        await session.flush()

        await self._record_legs(session, transfer, quote, sender_cur, recipient_cur)
        await self._notify_parties(session, transfer, quote, sender_cur, recipient_cur)

        logger.info(
            "Transfer %s completed: %s %s -> %s %s (fee %s, rate %s)",
            reference, sender_cur.code, amount, recipient_cur.code,
            quote.converted_amount, quote.transfer_fee, quote.exchange_rate,
        )
        return TransferResult(
            transfer_id=transfer.id,
            reference_number=reference,
            recipient_name=recipient.full_name,
            amount_sent=amount,
            amount_received=quote.converted_amount,
            exchange_rate=quote.exchange_rate,
            transfer_fee=quote.transfer_fee,
            total_deducted=quote.total_deducted,
            sender_currency=sender_cur.code,
            recipient_currency=recipient_cur.code,
            is_cross_border=quote.is_cross_border,
            message=(
                f"Cross-border transfer completed successfully from "
                f"{sender_cur.country} to {recipient_cur.country}"
                if quote.is_cross_border else "Money transfer completed successfully"
            ),
        )

    async def _record_legs(
        self,
        session: AsyncSession,
        transfer: MoneyTransfer,
        quote: TransferQuote,
        sender_cur: Currency,
        recipient_cur: Currency,
    ) -> None:
        cross_border = quote.is_cross_border
        rate = f"{quote.exchange_rate:.4f}"
        common = {
            "transfer_id": str(transfer.id),
            "original_amount": str(quote.amount),
            "exchange_rate": str(quote.exchange_rate),
            "is_cross_border": cross_border,
            "sender_country": sender_cur.country,
            "recipient_country": recipient_cur.country,
        }
        session.add_all([
            Transaction(
                user_id=transfer.sender_id,
                transaction_type=(
                    TransactionType.CROSS_BORDER_TRANSFER_SENT if cross_border
                    else TransactionType.MONEY_TRANSFER_SENT
                ),
                amount=-quote.total_deducted,
                currency=sender_cur.code,
                status=TransactionStatus.COMPLETED,
                reference_number=transfer.reference_number,
                description=(
                    f"Cross-border transfer to {recipient_cur.country} (Rate: {rate})"
                    if cross_border else "Money transfer to recipient"
                ),
                service_type="money_transfer",
                provider_name=PROVIDER_NAME,
                details={
                    **common,
                    "recipient_id": str(transfer.recipient_id),
                    "transfer_fee": str(quote.transfer_fee),
                    "recipient_currency": recipient_cur.code,
                    "converted_amount": str(quote.converted_amount),
                },
            ),
            Transaction(
                user_id=transfer.recipient_id,
                transaction_type=(
                    TransactionType.CROSS_BORDER_TRANSFER_RECEIVED if cross_border
                    else TransactionType.MONEY_TRANSFER_RECEIVED
                ),
                amount=quote.converted_amount,
                currency=recipient_cur.code,
                status=TransactionStatus.COMPLETED,
                reference_number=transfer.reference_number,
                description=(
                    f"Cross-border transfer from {sender_cur.country} (Rate: {rate})"
                    if cross_border else "Money transfer from sender"
                ),
                service_type="money_transfer",
                provider_name=PROVIDER_NAME,
                details={
                    **common,
                    "sender_id": str(transfer.sender_id),
                    "sender_currency": sender_cur.code,
                },
            ),
        ])
        await session.flush()

    async def _notify_parties(
        self,
        session: AsyncSession,
        transfer: MoneyTransfer,
        quote: TransferQuote,
        sender_cur: Currency,
        recipient_cur: Currency,
    ) -> None:
        sent = f"{sender_cur.code} {quote.amount:,.2f}"
        received = f"{recipient_cur.code} {quote.converted_amount:,.2f}"
        total = f"{sender_cur.code} {quote.total_deducted:,.2f}"

        if quote.is_cross_border:
            await self.notifications.notify(
                session,
                transfer.sender_id,
                title="Cross-Border Transfer Successful",
                body=(
                    f"You sent {sent} to {recipient_cur.country}. Recipient received "
                    f"{received}. Total deducted: {total}"
                ),
                type="cross_border_transfer",
            )
            await self.notifications.notify(
                session,
                transfer.recipient_id,
                title="International Funds Received",
                body=f"You received {received} from {sender_cur.country}",
                type="cross_border_transfer",
            )
        else:
            await self.notifications.notify(
                session,
                transfer.sender_id,
                title="Money Sent Successfully",
                body=f"You sent {sent} to recipient. Total deducted: {total}",
                type="money_transfer",
            )
            await self.notifications.notify(
                session,
                transfer.recipient_id,
                title="Money Received",
                body=f"You received {received} from sender",
                type="money_transfer",
            )
