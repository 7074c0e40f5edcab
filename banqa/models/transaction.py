"""Transaction SQLAlchemy ORM model."""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from banqa.db.base import Base
from banqa.models.types import JSONType, string_enum


class TransactionStatus(str, enum.Enum):
    """Transaction status enum.

    A transaction moves from PENDING to COMPLETED or FAILED at most once.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TransactionType(str, enum.Enum):
    """Kind of balance-affecting event a transaction records."""

    CREDIT = "credit"
    DEBIT = "debit"
    BILL_PAYMENT = "bill_payment"
    PURCHASE = "purchase"
    WALLET_TOPUP = "wallet_topup"
    MONEY_TRANSFER_SENT = "money_transfer_sent"
    MONEY_TRANSFER_RECEIVED = "money_transfer_received"
    CROSS_BORDER_TRANSFER_SENT = "cross_border_transfer_sent"
    CROSS_BORDER_TRANSFER_RECEIVED = "cross_border_transfer_received"


class Transaction(Base):
    """Audit record of a single balance-affecting event.

    Attributes:
        id: Unique identifier (UUID)
        user_id: Owner of the affected wallet
        transaction_type: What kind of event this is
        amount: Amount with DECIMAL(18,4) precision; the sent leg of a
            transfer is stored negative
        currency: Wallet currency the amount is expressed in
        status: pending, completed or failed
        reference_number: Human-facing reference, shared by both transfer legs
        description: Free text shown in the transaction list
        service_type: Service category (wallet_topup, money_transfer, ...)
        provider_name: External party that handled the event
        details: JSON metadata, stored in the ``metadata`` column
        idempotency_key: Unique replay guard for client retries
        created_at: Record creation timestamp
        updated_at: Last status/metadata change
    """

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        string_enum(TransactionType),
        nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 4),
        nullable=False
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="NGN"
    )
    status: Mapped[TransactionStatus] = mapped_column(
        string_enum(TransactionStatus, length=20),
        nullable=False,
        default=TransactionStatus.PENDING
    )
    reference_number: Mapped[str] = mapped_column(
        String(64),
        nullable=False
    )
    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True
    )
    service_type: Mapped[str | None] = mapped_column(
        String(40),
        nullable=True
    )
    provider_name: Mapped[str | None] = mapped_column(
        String(80),
        nullable=True
    )
    details: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        nullable=False,
        default=dict
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(128),
        unique=True,
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_transactions_user_id", "user_id"),
        Index("ix_transactions_reference_number", "reference_number"),
    )
