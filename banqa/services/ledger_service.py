"""Wallet ledger: the only code path that changes a wallet balance.

BALANCE UPDATES
===============

Every balance change is a single guarded statement executed by the database:

    UPDATE wallets
       SET balance = balance + :amount, version = version + 1
     WHERE user_id = :user_id AND currency = :currency
       AND balance + :amount >= 0
    RETURNING id, balance

The read-modify-write happens inside the database, so two concurrent syncs
for the same wallet cannot lose an update, and the ``balance + :amount >= 0``
guard means a debit either fits or touches nothing. When no row comes back
a follow-up read tells "wallet missing" apart from "not enough money".

The balance change and its Transaction row are written in the caller's
database transaction. Route handlers open it with ``session.begin()``, so
either both are committed or neither is.

EXAMPLE:
    async with session.begin():
        result = await LedgerService().sync_wallet(
            session, user_id, Decimal("2500"), TransactionType.CREDIT,
            reference="BQ_1700000000000_1a2b3c4d",
        )
"""

import logging
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.exceptions import InsufficientFundsError, NotFoundError, ValidationError
from banqa.models.transaction import Transaction, TransactionStatus, TransactionType
from banqa.models.wallet import Wallet
from banqa.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "NGN"


@dataclass(frozen=True)
class BalanceChange:
    """Outcome of one guarded balance update."""

    wallet_id: uuid.UUID
    previous_balance: Decimal
    new_balance: Decimal


@dataclass(frozen=True)
class SyncResult:
    """Outcome of :meth:`LedgerService.sync_wallet`.

    ``replayed`` is True when the reference had already been applied and
    the original outcome is being returned without touching the wallet.
    """

    new_balance: Decimal
    previous_balance: Decimal
    currency: str
    transaction_id: uuid.UUID
    replayed: bool = False


def generate_reference(prefix: str) -> str:
    """Time-based reference such as ``SYNC1700000000000``."""
    return f"{prefix}{int(time.time() * 1000)}"


class LedgerService:
    """Service for wallet reads and balance mutations."""

    def __init__(self, notifications: NotificationService | None = None) -> None:
        self.notifications = notifications or NotificationService()

    async def get_wallet(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        currency: str = DEFAULT_CURRENCY,
    ) -> Wallet | None:
        result = await session.execute(
            select(Wallet).where(Wallet.user_id == user_id, Wallet.currency == currency)
        )
        return result.scalar_one_or_none()

    async def get_balance(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        currency: str = DEFAULT_CURRENCY,
    ) -> Decimal | None:
        """Read the committed balance straight from the table (None if no wallet)."""
        return await session.scalar(
            select(Wallet.balance).where(
                Wallet.user_id == user_id,
                Wallet.currency == currency,
            )
        )

    async def list_wallets(self, session: AsyncSession, user_id: uuid.UUID) -> list[Wallet]:
        result = await session.execute(
            select(Wallet).where(Wallet.user_id == user_id).order_by(Wallet.currency)
        )
        return list(result.scalars().all())

    async def list_transactions(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        limit: int = 50,
    ) -> list[Transaction]:
        """Most recent transactions first."""
        result = await session.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_or_create_wallet(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        currency: str = DEFAULT_CURRENCY,
    ) -> Wallet:
        """Return the user's wallet in ``currency``, creating an empty one on first access."""
        wallet = await self.get_wallet(session, user_id, currency)
        if wallet is None:
            logger.info("Creating %s wallet for user %s", currency, user_id)
            wallet = Wallet(
                user_id=user_id,
                currency=currency,
                balance=Decimal("0.0000"),
                version=1,
            )
            session.add(wallet)
            await session.flush()
        return wallet

    async def apply_balance_change(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        currency: str,
        amount: Decimal,
        insufficient_message: str | None = None,
        missing_message: str = "Wallet not found",
    ) -> BalanceChange:
        """Atomically add ``amount`` (negative for a debit) to a wallet balance.

        Args:
            session: Active async database session (transaction managed by caller)
            user_id: Wallet owner
            currency: Wallet currency
            amount: Signed amount to add
            insufficient_message: User-facing message when the debit does not fit
            missing_message: User-facing message when the wallet does not exist

        Returns:
            BalanceChange: Balances before and after the update

        Raises:
            NotFoundError: If the wallet does not exist
            InsufficientFundsError: If the new balance would be negative
        """
        result = await session.execute(
            update(Wallet)
            .where(
                Wallet.user_id == user_id,
                Wallet.currency == currency,
                Wallet.balance + amount >= 0,
            )
            .values(
                balance=Wallet.balance + amount,
                version=Wallet.version + 1,
            )
            .returning(Wallet.id, Wallet.balance)
            .execution_options(synchronize_session=False)
        )
        row = result.one_or_none()

        if row is None:
            available = await self.get_balance(session, user_id, currency)
            if available is None:
                raise NotFoundError("Wallet", f"{user_id}/{currency}", message=missing_message)
            raise InsufficientFundsError(
                f"{user_id}/{currency}",
                -amount,
                available,
                message=insufficient_message,
            )

        wallet_id, new_balance = row
        logger.info(
            "Wallet %s (%s) balance %s -> %s",
            wallet_id, currency, new_balance - amount, new_balance,
        )
        return BalanceChange(
            wallet_id=wallet_id,
            previous_balance=new_balance - amount,
            new_balance=new_balance,
        )

    async def find_by_idempotency_key(
        self,
        session: AsyncSession,
        key: str,
    ) -> Transaction | None:
        result = await session.execute(
            select(Transaction).where(Transaction.idempotency_key == key)
        )
        return result.scalar_one_or_none()

    async def replay_sync(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        reference: str,
    ) -> SyncResult | None:
        """Outcome of an already applied sync for (user, reference), if any."""
        existing = await self.find_by_idempotency_key(session, f"sync:{user_id}:{reference}")
        if existing is None:
            return None
        logger.info("Wallet sync %s already applied, replaying", reference)
        ledger = existing.details.get("ledger", {})
        return SyncResult(
            new_balance=Decimal(ledger.get("new_balance", "0")),
            previous_balance=Decimal(ledger.get("previous_balance", "0")),
            currency=existing.currency,
            transaction_id=existing.id,
            replayed=True,
        )

    async def sync_wallet(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        amount: Decimal,
        transaction_type: TransactionType,
        currency: str = DEFAULT_CURRENCY,
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SyncResult:
        """Apply a signed amount to a wallet and record it as a completed transaction.

        Credits create the wallet on first use; debits require an existing
        wallet with enough balance. When ``reference`` is given the call is
        idempotent per (user, reference).

        Args:
            session: Active async database session (transaction managed by caller)
            user_id: Wallet owner
            amount: Positive to credit, negative to debit
            transaction_type: Type recorded on the transaction row
            currency: Wallet currency (default NGN)
            reference: External reference, e.g. the checkout tx_ref
            metadata: Extra JSON stored on the transaction

        Returns:
            SyncResult: New and previous balance plus the transaction id

        Raises:
            ValidationError: If amount is zero
            NotFoundError: If debiting a wallet that does not exist
            InsufficientFundsError: If a debit exceeds the balance
        """
        if amount == 0:
            raise ValidationError("Missing required fields: user_id, amount, transaction_type")

        idempotency_key = f"sync:{user_id}:{reference}" if reference else None
        if idempotency_key:
            replay = await self.replay_sync(session, user_id, reference)
            if replay is not None:
                return replay

        is_credit = amount > 0
        if is_credit:
            await self.get_or_create_wallet(session, user_id, currency)

        change = await self.apply_balance_change(
            session,
            user_id,
            currency,
            amount,
            insufficient_message="Insufficient wallet balance",
        )

        transaction = Transaction(
            user_id=user_id,
            transaction_type=transaction_type,
            amount=abs(amount),
            currency=currency,
            status=TransactionStatus.COMPLETED,
            reference_number=reference or generate_reference("SYNC"),
            description=(
                f"Wallet {'credit' if is_credit else 'debit'} via {transaction_type.value}"
            ),
            service_type="wallet_topup" if is_credit else "wallet_debit",
            provider_name="Flutterwave",
            details={
                **(metadata or {}),
                "ledger": {
                    "previous_balance": str(change.previous_balance),
                    "new_balance": str(change.new_balance),
                },
            },
            idempotency_key=idempotency_key,
        )
        session.add(transaction)
        await session.flush()

        await self.notifications.notify(
            session,
            user_id,
            title="Wallet Credited" if is_credit else "Wallet Debited",
            body=(
                f"Your wallet has been {'credited' if is_credit else 'debited'} with "
                f"{currency} {abs(amount):,.2f}. New balance: {currency} {change.new_balance:,.2f}"
            ),
            details={
                "transaction_id": str(transaction.id),
                "amount": str(amount),
                "new_balance": str(change.new_balance),
            },
        )

        logger.info(
            "Wallet sync for user %s: %s %s (%s), transaction %s",
            user_id, currency, amount, transaction_type.value, transaction.id,
        )
        return SyncResult(
            new_balance=change.new_balance,
            previous_balance=change.previous_balance,
            currency=currency,
            transaction_id=transaction.id,
        )
