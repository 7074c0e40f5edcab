"""Bill payment Pydantic schemas."""

import uuid
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from banqa.models.transaction import TransactionStatus


class BillVerifyRequest(BaseModel):
    service_type: str = Field(..., max_length=40)
    provider_name: str = Field(..., max_length=80)
    customer_data: dict[str, Any] = Field(default_factory=dict)


class BillVerifyResponse(BaseModel):
    valid: bool
    message: str
    customer_info: dict[str, Any] | None = None
    amount_due: Decimal | None = None

    @field_serializer("amount_due")
    def serialize_amount_due(self, value: Decimal | None) -> str | None:
        return None if value is None else str(value)


class BillPayRequest(BaseModel):
    """Request schema for paying a bill from the NGN wallet.

    Resubmitting the same ``reference_id`` returns the first outcome.
    """

    service_type: str = Field(..., max_length=40)
    provider_name: str = Field(..., max_length=80)
    amount: Decimal = Field(..., gt=0, decimal_places=4)
    customer_data: dict[str, Any] = Field(default_factory=dict)
    reference_id: str | None = Field(default=None, max_length=64)


class BillPayResponse(BaseModel):
    success: bool
    status: TransactionStatus
    transaction_id: uuid.UUID
    message: str
    replayed: bool = False

    @field_serializer("status")
    def serialize_status(self, status: TransactionStatus) -> str:
        return status.value
