"""Bill service configuration SQLAlchemy ORM model."""

import uuid
from typing import Any

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from banqa.db.base import Base
from banqa.models.types import JSONType


class BillService(Base):
    """A payable service offered by a provider (e.g. electricity / IKEDC).

    ``input_fields`` declares the customer inputs the service needs, as a
    list of ``{"name": ..., "label": ..., "required": bool}`` objects.
    """

    __tablename__ = "services"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    service_type: Mapped[str] = mapped_column(String(40), nullable=False)
    provider_name: Mapped[str] = mapped_column(String(80), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    input_fields: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
        default=list
    )

    __table_args__ = (
        UniqueConstraint("service_type", "provider_name", name="uq_services_type_provider"),
    )
