"""MoneyTransfer SQLAlchemy ORM model."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from banqa.db.base import Base
from banqa.models.transaction import TransactionStatus
from banqa.models.types import string_enum


class MoneyTransfer(Base):
    """One peer-to-peer transfer, parent of a sent and a received transaction.

    ``amount_sent`` is in the sender's currency, ``amount_received`` in the
    recipient's. ``request_id`` is the client-generated replay guard and is
    unique per sender.
    """

    __tablename__ = "money_transfers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False,
        index=True
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False,
        index=True
    )
    sender_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    recipient_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    amount_sent: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    amount_received: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(Numeric(18, 8), nullable=False)
    transfer_fee: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    status: Mapped[TransactionStatus] = mapped_column(
        string_enum(TransactionStatus, length=20),
        nullable=False,
        default=TransactionStatus.COMPLETED
    )
    reference_number: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False
    )
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("sender_id", "request_id", name="uq_money_transfers_sender_request"),
    )
