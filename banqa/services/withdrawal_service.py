"""Withdrawal PIN, one-time code and payout handling.

A payout is a two step exchange:

1. ``verify_pin``: the caller proves the withdrawal PIN and receives a
   6-digit code by e-mail. The code is bound to the amount and the
   destination bank account.
2. ``verify_otp_and_withdraw``: the caller presents the code. A matching
   unused, unexpired code is consumed, the wallet is debited with the
   guarded ledger update and a ``processing`` WithdrawalRequest is created.

PINs and codes are stored only as salted hashes (see ``banqa.core.security``).
E-mails are returned to the caller as :class:`OutboundEmail` values and are
queued after the database transaction commits.
"""

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.config import get_settings
from banqa.core.exceptions import (
    InsufficientFundsError,
    NotFoundError,
    PinVerificationError,
    ValidationError,
)
from banqa.core.security import generate_otp, hash_secret, verify_secret
from banqa.models.bank_account import BankAccount
from banqa.models.profile import Profile
from banqa.models.transaction import Transaction, TransactionStatus, TransactionType
from banqa.models.withdrawal import WithdrawalOtp, WithdrawalPin, WithdrawalRequest, WithdrawalStatus
from banqa.services.ledger_service import DEFAULT_CURRENCY, LedgerService, generate_reference
from banqa.services.notification_service import NotificationService, OutboundEmail

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"[0-9]{4,6}")

VERIFY_PIN = "verify_pin"
VERIFY_OTP_AND_WITHDRAW = "verify_otp_and_withdraw"


@dataclass
class WithdrawalOutcome:
    message: str
    reference_number: str | None = None
    withdrawal_id: uuid.UUID | None = None
    emails: list[OutboundEmail] = field(default_factory=list)


class WithdrawalService:
    def __init__(
        self,
        ledger: LedgerService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self.notifications = notifications or NotificationService()
        self.ledger = ledger or LedgerService(self.notifications)

    async def set_pin(self, session: AsyncSession, user_id: uuid.UUID, pin: str) -> None:
        """Create or replace the user's withdrawal PIN (4 to 6 digits)."""
        if not PIN_PATTERN.fullmatch(pin or ""):
            raise ValidationError("PIN must be 4 to 6 digits")

        pin_hash = hash_secret(pin)
        existing = await session.get(WithdrawalPin, user_id)
        if existing is None:
            session.add(WithdrawalPin(user_id=user_id, pin_hash=pin_hash))
        else:
            existing.pin_hash = pin_hash
        await session.flush()
        logger.info("Withdrawal PIN set for user %s", user_id)

    async def verify_pin(self, session: AsyncSession, user_id: uuid.UUID, pin: str) -> None:
        """Raise unless ``pin`` matches the stored withdrawal PIN.

        Raises:
            NotFoundError: The user never created a PIN
            PinVerificationError: The PIN does not match
        """
        pin_hash = await session.scalar(
            select(WithdrawalPin.pin_hash).where(WithdrawalPin.user_id == user_id)
        )
        if pin_hash is None:
            raise NotFoundError(
                "WithdrawalPin",
                str(user_id),
                message="Withdrawal PIN not set. Please create a PIN first.",
            )
        if not verify_secret(pin or "", pin_hash):
            logger.warning("Withdrawal PIN mismatch for user %s", user_id)
            raise PinVerificationError()

    async def _get_profile(self, session: AsyncSession, user_id: uuid.UUID) -> Profile:
        profile = await session.get(Profile, user_id)
        if profile is None:
            raise NotFoundError("Profile", str(user_id), message="User profile not found")
        return profile

    async def _get_bank_account(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        bank_account_id: uuid.UUID,
    ) -> BankAccount:
        account = await session.get(BankAccount, bank_account_id)
        if account is None or account.user_id != user_id:
            raise NotFoundError("BankAccount", str(bank_account_id), message="Bank account not found")
        return account

    async def request_otp(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        pin: str,
        amount: Decimal,
        bank_account_id: uuid.UUID,
    ) -> WithdrawalOutcome:
        """Verify the PIN and issue a one-time code for this exact withdrawal."""
        if amount <= 0:
            raise ValidationError("Please enter a valid amount")
        profile = await self._get_profile(session, user_id)
        await self.verify_pin(session, user_id, pin)
        await self._get_bank_account(session, user_id, bank_account_id)

        settings = get_settings()
        code = generate_otp()
        session.add(WithdrawalOtp(
            user_id=user_id,
            otp_hash=hash_secret(code),
            withdrawal_amount=amount,
            bank_account_id=bank_account_id,
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.WITHDRAWAL_OTP_TTL_MINUTES),
            is_used=False,
        ))
        await session.flush()
        logger.info("Withdrawal OTP issued for user %s, amount %s", user_id, amount)

        return WithdrawalOutcome(
            message="OTP sent to your email address",
            emails=[OutboundEmail(
                to=profile.email,
                subject="Withdrawal Verification Code",
                body=(
                    f"Hello {profile.full_name},\n\n"
                    f"You requested to withdraw ₦{amount:,.2f} from your Banqa wallet.\n"
                    f"Your verification code is: {code}\n"
                    f"This code will expire in {settings.WITHDRAWAL_OTP_TTL_MINUTES} minutes.\n\n"
                    "If you didn't request this withdrawal, please contact support immediately."
                ),
            )],
        )

    async def _match_otp(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        otp_code: str,
        amount: Decimal,
        bank_account_id: uuid.UUID,
    ) -> WithdrawalOtp | None:
        result = await session.execute(
            select(WithdrawalOtp)
            .where(
                WithdrawalOtp.user_id == user_id,
                WithdrawalOtp.bank_account_id == bank_account_id,
                WithdrawalOtp.is_used.is_(False),
                WithdrawalOtp.expires_at >= datetime.now(timezone.utc),
            )
            .order_by(WithdrawalOtp.created_at.desc())
        )
        for candidate in result.scalars():
            if candidate.withdrawal_amount == amount and verify_secret(otp_code or "", candidate.otp_hash):
                return candidate
        return None

    async def withdraw(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        otp_code: str,
        amount: Decimal,
        bank_account_id: uuid.UUID,
    ) -> WithdrawalOutcome:
        """Consume a one-time code and debit the NGN wallet.

        Raises:
            ValidationError: No matching unused, unexpired code
            InsufficientFundsError: Balance below ``amount``; nothing is changed
        """
        profile = await self._get_profile(session, user_id)
        otp = await self._match_otp(session, user_id, otp_code, amount, bank_account_id)
        if otp is None:
            raise ValidationError("Invalid or expired OTP code")

        available = await self.ledger.get_balance(session, user_id, DEFAULT_CURRENCY)
        if available is None:
            raise NotFoundError("Wallet", f"{user_id}/{DEFAULT_CURRENCY}", message="Wallet not found")
        if available < amount:
            raise InsufficientFundsError(
                f"{user_id}/{DEFAULT_CURRENCY}",
                amount,
                available,
                message="Insufficient wallet balance",
            )

        # Re-checked under the row lock; a concurrent request may have spent it
        consumed = await session.execute(
            update(WithdrawalOtp)
            .where(WithdrawalOtp.id == otp.id, WithdrawalOtp.is_used.is_(False))
            .values(is_used=True)
            .execution_options(synchronize_session=False)
        )
        if consumed.rowcount != 1:
            logger.warning("Withdrawal code for user %s was already used", user_id)
            raise ValidationError("Invalid or expired OTP code")

        reference = generate_reference("WD")
        withdrawal = WithdrawalRequest(
            user_id=user_id,
            bank_account_id=bank_account_id,
            amount=amount,
            reference_number=reference,
            status=WithdrawalStatus.PROCESSING,
            pin_verified=True,
            otp_verified=True,
        )
        session.add(withdrawal)

        change = await self.ledger.apply_balance_change(
            session,
            user_id,
            DEFAULT_CURRENCY,
            -amount,
            insufficient_message="Insufficient wallet balance",
        )
        session.add(Transaction(
            user_id=user_id,
            transaction_type=TransactionType.DEBIT,
            amount=amount,
            currency=DEFAULT_CURRENCY,
            status=TransactionStatus.COMPLETED,
            reference_number=reference,
            description="Withdrawal to bank account",
            service_type="wallet_withdrawal",
            details={"bank_account_id": str(bank_account_id)},
        ))
        await self.notifications.notify(
            session,
            user_id,
            title="Withdrawal Processing",
            body=(
                f"Your withdrawal of ₦{amount:,.2f} is being processed. "
                f"New balance: ₦{change.new_balance:,.2f}"
            ),
            type="withdrawal",
            details={"reference_number": reference},
        )
        await session.flush()
        logger.info("Withdrawal %s of %s for user %s created", reference, amount, user_id)

        return WithdrawalOutcome(
            message="Withdrawal processed successfully",
            reference_number=reference,
            withdrawal_id=withdrawal.id,
            emails=[OutboundEmail(
                to=profile.email,
                subject="Withdrawal Request Processed",
                body=(
                    f"Hello {profile.full_name},\n\n"
                    "Your withdrawal request has been processed successfully.\n"
                    f"Amount: ₦{amount:,.2f}\n"
                    f"Reference: {reference}\n"
                    "The funds will be credited to your bank account within 24 hours."
                ),
            )],
        )

    async def process(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        action: str,
        amount: Decimal,
        bank_account_id: uuid.UUID,
        pin: str | None = None,
        otp_code: str | None = None,
    ) -> WithdrawalOutcome:
        """Dispatch one step of the withdrawal exchange by ``action`` name."""
        if action == VERIFY_PIN:
            return await self.request_otp(session, user_id, pin or "", amount, bank_account_id)
        if action == VERIFY_OTP_AND_WITHDRAW:
            return await self.withdraw(session, user_id, otp_code or "", amount, bank_account_id)
        raise ValidationError("Invalid action")
