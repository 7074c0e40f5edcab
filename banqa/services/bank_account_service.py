"""Bank accounts registered as withdrawal destinations."""

import logging
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.exceptions import ConflictError, NotFoundError, ValidationError
from banqa.models.bank_account import BankAccount

logger = logging.getLogger(__name__)


class BankAccountService:
    async def list_accounts(self, session: AsyncSession, user_id: uuid.UUID) -> list[BankAccount]:
        result = await session.execute(
            select(BankAccount)
            .where(BankAccount.user_id == user_id)
            .order_by(BankAccount.is_default.desc(), BankAccount.created_at)
        )
        return list(result.scalars().all())

    async def add_account(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        account_name: str,
        account_number: str,
        bank_name: str,
        bank_code: str,
    ) -> BankAccount:
        """Register an account; the user's first account becomes the default."""
        account_number = account_number.strip()
        if not account_number.isdigit() or len(account_number) != 10:
            raise ValidationError("Account number must be 10 digits")

        duplicate = await session.scalar(
            select(BankAccount.id).where(
                BankAccount.user_id == user_id,
                BankAccount.account_number == account_number,
                BankAccount.bank_code == bank_code,
            )
        )
        if duplicate is not None:
            raise ConflictError("Bank account already added")

        existing = await session.scalar(
            select(func.count()).select_from(BankAccount).where(BankAccount.user_id == user_id)
        )
        account = BankAccount(
            user_id=user_id,
            account_name=account_name.strip(),
            account_number=account_number,
            bank_name=bank_name.strip(),
            bank_code=bank_code.strip(),
            is_default=not existing,
            is_verified=False,
        )
        session.add(account)
        await session.flush()
        logger.info("Bank account %s added for user %s", account.id, user_id)
        return account

    async def set_default(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        account_id: uuid.UUID,
    ) -> BankAccount:
        account = await session.get(BankAccount, account_id)
        if account is None or account.user_id != user_id:
            raise NotFoundError("BankAccount", str(account_id), message="Bank account not found")

        await session.execute(
            update(BankAccount)
            .where(BankAccount.user_id == user_id, BankAccount.id != account_id)
            .values(is_default=False)
        )
        account.is_default = True
        await session.flush()
        return account
