"""Transaction Pydantic schemas for request/response validation."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from banqa.models.transaction import TransactionStatus, TransactionType


class TransactionRead(BaseModel):
    """Schema for reading Transaction data.

    Amount is serialized as a decimal string for precision.
    Status and type are serialized as string enum values.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    transaction_type: TransactionType
    amount: Decimal
    currency: str
    status: TransactionStatus
    reference_number: str
    description: str | None = None
    service_type: str | None = None
    provider_name: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="details")
    created_at: datetime

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal) -> str:
        """Serialize amount as decimal string to preserve precision."""
        return str(amount)

    @field_serializer("status", "transaction_type")
    def serialize_enum(self, value: TransactionStatus | TransactionType) -> str:
        return value.value


class TransactionHistoryResponse(BaseModel):
    success: bool = True
    transactions: list[TransactionRead]
