"""Profile SQLAlchemy ORM model."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from banqa.db.base import Base


class Profile(Base):
    """User profile mirrored from the authentication provider.

    Attributes:
        id: Unique identifier (UUID), same as the auth subject
        email: Contact address used for OTP and receipts
        full_name: Display name shown to transfer senders
        phone_number: Optional phone number for checkout
        recipient_code: Shareable transfer handle, two letters + 8 digits
        is_active: Account status
        created_at: Record creation timestamp
        updated_at: Last modification timestamp
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True
    )
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    phone_number: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True
    )
    recipient_code: Mapped[str] = mapped_column(
        String(10),
        unique=True,
        nullable=False,
        index=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True
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
