"""Money transfer Pydantic schemas."""

import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CurrencyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    symbol: str
    country: str
    exchange_rate_to_base: Decimal

    @field_serializer("exchange_rate_to_base")
    def serialize_rate(self, rate: Decimal) -> str:
        return str(rate)


class CurrencyListResponse(BaseModel):
    success: bool = True
    currencies: list[CurrencyRead]


class RecipientRead(BaseModel):
    """Public view of a recipient; no contact details are exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    recipient_code: str


class RecipientResponse(BaseModel):
    success: bool = True
    recipient: RecipientRead


class QuoteRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=4)
    sender_currency: str = Field(default="NGN", min_length=3, max_length=3)
    recipient_currency: str = Field(..., min_length=3, max_length=3)

    @field_validator("sender_currency", "recipient_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class QuoteResponse(BaseModel):
    """Conversion and fee for a prospective transfer.

    ``transfer_fee`` is 1% of ``converted_amount`` and ``total_deducted`` is
    ``amount + transfer_fee``.
    """

    success: bool = True
    amount: Decimal
    sender_currency: str
    recipient_currency: str
    exchange_rate: Decimal
    converted_amount: Decimal
    transfer_fee: Decimal
    total_deducted: Decimal

    @field_serializer(
        "amount", "exchange_rate", "converted_amount", "transfer_fee", "total_deducted"
    )
    def serialize_decimal(self, value: Decimal) -> str:
        return str(value)


class VerifyPinRequest(BaseModel):
    pin: str = Field(..., min_length=4, max_length=6)


class TransferRequest(BaseModel):
    """Request schema for a money transfer.

    The sender is the authenticated caller. ``request_id`` is generated by
    the client once per transfer attempt; retries must reuse it.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipient_id": "123e4567-e89b-12d3-a456-426614174001",
                "amount": "1000.0000",
                "sender_currency": "NGN",
                "recipient_currency": "GHS",
                "description": "School fees",
                "request_id": "5f0c6e1e-8d0f-4b7b-9a53-2f0b1c8e9d10",
            }
        }
    )

    recipient_id: uuid.UUID = Field(..., description="Recipient profile UUID")
    amount: Decimal = Field(..., gt=0, decimal_places=4, description="Amount in sender currency")
    sender_currency: str = Field(default="NGN", min_length=3, max_length=3)
    recipient_currency: str = Field(default="NGN", min_length=3, max_length=3)
    description: str | None = Field(default=None, max_length=255)
    request_id: str | None = Field(default=None, max_length=64)

    @field_validator("sender_currency", "recipient_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class TransferResponse(BaseModel):
    success: bool = True
    transfer_id: uuid.UUID
    reference_number: str
    recipient_name: str
    amount_sent: Decimal
    amount_received: Decimal
    exchange_rate: Decimal
    transfer_fee: Decimal
    total_deducted: Decimal
    sender_currency: str
    recipient_currency: str
    is_cross_border: bool
    message: str
    replayed: bool = False

    @field_serializer(
        "amount_sent", "amount_received", "exchange_rate", "transfer_fee", "total_deducted"
    )
    def serialize_decimal(self, value: Decimal) -> str:
        return str(value)
