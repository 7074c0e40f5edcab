"""Withdrawal endpoints."""

from fastapi import APIRouter

from banqa.api.deps import CurrentContext, DBSession
from banqa.schemas.withdrawal import (
    PinSetResponse,
    SetPinRequest,
    WithdrawalActionRequest,
    WithdrawalActionResponse,
)
from banqa.services.notification_service import dispatch_audit, dispatch_emails
from banqa.services.withdrawal_service import WithdrawalService

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


@router.put("/pin", response_model=PinSetResponse)
async def set_pin(request: SetPinRequest, session: DBSession, ctx: CurrentContext):
    async with session.begin():
        await WithdrawalService().set_pin(session, ctx.user_id, request.pin)
    return PinSetResponse()


@router.post("", response_model=WithdrawalActionResponse)
async def process_withdrawal(
    request: WithdrawalActionRequest,
    session: DBSession,
    ctx: CurrentContext,
):
    """
    Run one step of a withdrawal.

    - **verify_pin**: checks the PIN and e-mails a one-time code
    - **verify_otp_and_withdraw**: consumes the code and debits the wallet
    """
    async with session.begin():
        outcome = await WithdrawalService().process(
            session,
            ctx.user_id,
            action=request.action,
            amount=request.amount,
            bank_account_id=request.bank_account_id,
            pin=request.pin,
            otp_code=request.otp_code,
        )

    dispatch_emails(outcome.emails)
    if outcome.withdrawal_id is not None:
        dispatch_audit(
            str(outcome.withdrawal_id),
            {
                "kind": "withdrawal",
                "user_id": str(ctx.user_id),
                "amount": str(request.amount),
                "bank_account_id": str(request.bank_account_id),
                "status": "processing",
                "reference_number": outcome.reference_number,
            },
        )

    return WithdrawalActionResponse(
        message=outcome.message,
        reference_number=outcome.reference_number,
    )
