"""Bank account Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BankAccountCreate(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=255)
    account_number: str = Field(..., pattern=r"^[0-9]{10}$")
    bank_name: str = Field(..., min_length=1, max_length=120)
    bank_code: str = Field(..., min_length=1, max_length=10)


class BankAccountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    account_name: str
    account_number: str
    bank_name: str
    bank_code: str
    is_default: bool
    is_verified: bool
    created_at: datetime


class BankAccountResponse(BaseModel):
    success: bool = True
    account: BankAccountRead


class BankAccountListResponse(BaseModel):
    success: bool = True
    accounts: list[BankAccountRead]
