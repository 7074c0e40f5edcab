"""Currency SQLAlchemy ORM model."""

from decimal import Decimal

from sqlalchemy import Boolean, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from banqa.db.base import Base


class Currency(Base):
    """Supported wallet currency and its rate against the base currency.

    ``exchange_rate_to_base`` is units of this currency per one unit of
    the base currency (NGN), so the base currency itself has rate 1.
    """

    __tablename__ = "currencies"

    code: Mapped[str] = mapped_column(String(3), primary_key=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    symbol: Mapped[str] = mapped_column(String(8), nullable=False)
    country: Mapped[str] = mapped_column(String(80), nullable=False)
    exchange_rate_to_base: Mapped[Decimal] = mapped_column(
        Numeric(18, 8),
        nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
