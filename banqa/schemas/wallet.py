"""Wallet Pydantic schemas for request/response validation."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from banqa.models.transaction import TransactionType


class WalletRead(BaseModel):
    """Schema for reading Wallet data.

    Balance is serialized as a decimal string for precision.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    currency: str
    balance: Decimal
    version: int
    updated_at: datetime

    @field_serializer("balance")
    def serialize_balance(self, balance: Decimal) -> str:
        """Serialize balance as decimal string to preserve precision."""
        return str(balance)


class WalletBalancesResponse(BaseModel):
    success: bool = True
    wallets: list[WalletRead]


class WalletSyncRequest(BaseModel):
    """Request schema for a ledger sync.

    Positive amounts credit the wallet, negative amounts debit it. Only
    internal services may submit one; ``user_id`` names the wallet owner
    and defaults to the token subject.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "5f0c2a9e-8d1b-4c7e-9a3f-2b6d1e4c8a70",
                "amount": "2500.0000",
                "transaction_type": "credit",
                "currency": "NGN",
                "reference": "BQ_1700000000000_1a2b3c4d",
            }
        }
    )

    user_id: uuid.UUID | None = None
    amount: Decimal = Field(..., decimal_places=4, description="Signed amount")
    transaction_type: TransactionType
    currency: str = Field(default="NGN", min_length=3, max_length=3)
    reference: str | None = Field(default=None, max_length=64)
    metadata: dict[str, Any] | None = None

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, value: Decimal) -> Decimal:
        if value == 0:
            raise ValueError("amount must not be zero")
        return value

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class WalletSyncResponse(BaseModel):
    success: bool = True
    new_balance: Decimal
    previous_balance: Decimal
    currency: str
    transaction_id: uuid.UUID
    replayed: bool = False

    @field_serializer("new_balance", "previous_balance")
    def serialize_balance(self, value: Decimal) -> str:
        return str(value)
