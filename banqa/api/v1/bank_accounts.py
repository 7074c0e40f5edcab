"""Bank account endpoints."""

import uuid

from fastapi import APIRouter

from banqa.api.deps import CurrentContext, DBSession
from banqa.schemas.bank_account import (
    BankAccountCreate,
    BankAccountListResponse,
    BankAccountRead,
    BankAccountResponse,
)
from banqa.services.bank_account_service import BankAccountService

router = APIRouter(prefix="/bank-accounts", tags=["bank-accounts"])


@router.get("", response_model=BankAccountListResponse)
async def list_bank_accounts(session: DBSession, ctx: CurrentContext):
    accounts = await BankAccountService().list_accounts(session, ctx.user_id)
    return BankAccountListResponse(accounts=[BankAccountRead.model_validate(a) for a in accounts])


@router.post("", response_model=BankAccountResponse, status_code=201)
async def add_bank_account(request: BankAccountCreate, session: DBSession, ctx: CurrentContext):
    async with session.begin():
        account = await BankAccountService().add_account(
            session,
            ctx.user_id,
            account_name=request.account_name,
            account_number=request.account_number,
            bank_name=request.bank_name,
            bank_code=request.bank_code,
        )
        await session.refresh(account)
    return BankAccountResponse(account=BankAccountRead.model_validate(account))


@router.post("/{account_id}/default", response_model=BankAccountResponse)
async def set_default_bank_account(account_id: uuid.UUID, session: DBSession, ctx: CurrentContext):
    async with session.begin():
        account = await BankAccountService().set_default(session, ctx.user_id, account_id)
    return BankAccountResponse(account=BankAccountRead.model_validate(account))
