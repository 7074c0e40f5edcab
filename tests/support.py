"""Database helpers for service-level tests.

SQLite stores DECIMAL as floating point, so tests keep amounts modest;
PostgreSQL handles the full DECIMAL(18,4) range.
"""

import random
import uuid
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from banqa.db.base import Base
from banqa.models import BankAccount, BillService, Currency, Profile, Wallet


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session bound to a brand new in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with maker() as session:
            yield session
    finally:
        await engine.dispose()


def random_recipient_code() -> str:
    return f"BQ{random.randint(0, 99_999_999):08d}"


async def add_profile(
    session: AsyncSession,
    full_name: str = "Ada Obi",
    recipient_code: str | None = None,
    email: str | None = None,
) -> Profile:
    profile = Profile(
        id=uuid.uuid4(),
        email=email or f"user_{uuid.uuid4().hex[:8]}@example.com",
        full_name=full_name,
        recipient_code=recipient_code or random_recipient_code(),
        is_active=True,
    )
    session.add(profile)
    await session.commit()
    return profile


async def add_wallet(
    session: AsyncSession,
    user_id: uuid.UUID,
    balance: Decimal | str,
    currency: str = "NGN",
) -> Wallet:
    wallet = Wallet(
        user_id=user_id,
        currency=currency,
        balance=Decimal(str(balance)),
        version=1,
    )
    session.add(wallet)
    await session.commit()
    return wallet


async def add_currencies(session: AsyncSession) -> None:
    """NGN base plus two destination currencies."""
    session.add_all([
        Currency(code="NGN", name="Nigerian Naira", symbol="₦", country="Nigeria",
                 exchange_rate_to_base=Decimal("1"), is_active=True),
        Currency(code="GHS", name="Ghanaian Cedi", symbol="₵", country="Ghana",
                 exchange_rate_to_base=Decimal("12.5"), is_active=True),
        Currency(code="KES", name="Kenyan Shilling", symbol="KSh", country="Kenya",
                 exchange_rate_to_base=Decimal("0.5"), is_active=False),
    ])
    await session.commit()


async def add_service(
    session: AsyncSession,
    service_type: str = "electricity",
    provider_name: str = "IKEDC",
    input_fields: list[dict[str, Any]] | None = None,
) -> BillService:
    service = BillService(
        service_type=service_type,
        provider_name=provider_name,
        is_active=True,
        input_fields=input_fields if input_fields is not None else [
            {"name": "meter_number", "label": "Meter Number", "required": True},
            {"name": "customer_name", "label": "Customer Name", "required": False},
        ],
    )
    session.add(service)
    await session.commit()
    return service


async def add_bank_account(session: AsyncSession, user_id: uuid.UUID) -> BankAccount:
    account = BankAccount(
        user_id=user_id,
        account_name="Ada Obi",
        account_number="0123456789",
        bank_name="Access Bank",
        bank_code="044",
        is_default=True,
        is_verified=True,
    )
    session.add(account)
    await session.commit()
    return account
