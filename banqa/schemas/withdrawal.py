"""Withdrawal Pydantic schemas."""

import uuid
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class SetPinRequest(BaseModel):
    pin: str = Field(..., pattern=r"^[0-9]{4,6}$")


class WithdrawalActionRequest(BaseModel):
    """One step of the withdrawal exchange.

    ``verify_pin`` needs ``pin``; ``verify_otp_and_withdraw`` needs
    ``otp_code``. Amount and bank account must be identical in both steps.
    """

    action: str = Field(..., description="verify_pin or verify_otp_and_withdraw")
    amount: Decimal = Field(..., gt=0, decimal_places=4)
    bank_account_id: uuid.UUID
    pin: str | None = Field(default=None, max_length=6)
    otp_code: str | None = Field(default=None, max_length=6)


class WithdrawalActionResponse(BaseModel):
    success: Literal[True] = True
    message: str
    reference_number: str | None = None


class PinSetResponse(BaseModel):
    success: bool = True
    message: str = "Withdrawal PIN saved"
