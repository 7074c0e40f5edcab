"""Wallet top-up Pydantic schemas."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InitializePaymentRequest(BaseModel):
    amount: Decimal = Field(..., decimal_places=4)


class InitializePaymentResponse(BaseModel):
    """Descriptor for the hosted checkout widget."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    payment_data: dict[str, Any] = Field(..., serialization_alias="paymentData")
    reference: str


class ConfirmPaymentRequest(BaseModel):
    transaction_id: str = Field(..., min_length=1, description="Checkout transaction id")
