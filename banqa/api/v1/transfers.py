"""Money transfer endpoints."""

from fastapi import APIRouter
from sqlalchemy.exc import IntegrityError

from banqa.api.deps import CurrentContext, DBSession
from banqa.schemas.transfer import (
    CurrencyListResponse,
    CurrencyRead,
    QuoteRequest,
    QuoteResponse,
    RecipientRead,
    RecipientResponse,
    TransferRequest,
    TransferResponse,
    VerifyPinRequest,
)
from banqa.services.notification_service import dispatch_audit
from banqa.services.transfer_service import TransferService

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.get("/currencies", response_model=CurrencyListResponse)
async def list_currencies(session: DBSession, ctx: CurrentContext):
    currencies = await TransferService().list_active_currencies(session)
    return CurrencyListResponse(currencies=[CurrencyRead.model_validate(c) for c in currencies])


@router.get("/recipients/{recipient_code}", response_model=RecipientResponse)
async def find_recipient(recipient_code: str, session: DBSession, ctx: CurrentContext):
    """Look up a recipient by Banqa ID (case-insensitive, e.g. ``bq12345678``)."""
    profile = await TransferService().find_recipient(session, ctx, recipient_code)
    return RecipientResponse(recipient=RecipientRead.model_validate(profile))


@router.post("/quote", response_model=QuoteResponse)
async def quote_transfer(request: QuoteRequest, session: DBSession, ctx: CurrentContext):
    quote = await TransferService().quote(
        session, request.amount, request.sender_currency, request.recipient_currency
    )
    return QuoteResponse(
        amount=quote.amount,
        sender_currency=quote.sender_currency,
        recipient_currency=quote.recipient_currency,
        exchange_rate=quote.exchange_rate,
        converted_amount=quote.converted_amount,
        transfer_fee=quote.transfer_fee,
        total_deducted=quote.total_deducted,
    )


@router.post("/verify-pin")
async def verify_pin(request: VerifyPinRequest, session: DBSession, ctx: CurrentContext):
    await TransferService().verify_pin(session, ctx, request.pin)
    return {"success": True}


@router.post("", response_model=TransferResponse, status_code=200)
async def process_transfer(
    request: TransferRequest,
    session: DBSession,
    ctx: CurrentContext,
):
    """
    Send money from the caller to another Banqa user.

    - **recipient_id**: recipient profile UUID
    - **amount**: amount in the sender's currency
    - **request_id**: client-generated; a retry with the same value returns
      the original transfer

    The debit, the credit and every record of the transfer commit together.
    """
    service = TransferService()
    try:
        async with session.begin():
            result = await service.process_transfer(
                session,
                ctx,
                recipient_id=request.recipient_id,
                amount=request.amount,
                sender_currency=request.sender_currency,
                recipient_currency=request.recipient_currency,
                description=request.description,
                request_id=request.request_id,
            )
    except IntegrityError:
        # A concurrent submission with the same request_id committed first
        await session.rollback()
        result = None
        if request.request_id:
            result = await service.replay_transfer(session, ctx.user_id, request.request_id)
        if result is None:
            raise

    if not result.replayed:
        dispatch_audit(
            str(result.transfer_id),
            {
                "kind": "money_transfer",
                "sender_id": str(ctx.user_id),
                "recipient_id": str(request.recipient_id),
                "amount": str(result.amount_sent),
                "amount_received": str(result.amount_received),
                "transfer_fee": str(result.transfer_fee),
                "status": "completed",
                "reference_number": result.reference_number,
            },
        )

    return TransferResponse(
        transfer_id=result.transfer_id,
        reference_number=result.reference_number,
        recipient_name=result.recipient_name,
        amount_sent=result.amount_sent,
        amount_received=result.amount_received,
        exchange_rate=result.exchange_rate,
        transfer_fee=result.transfer_fee,
        total_deducted=result.total_deducted,
        sender_currency=result.sender_currency,
        recipient_currency=result.recipient_currency,
        is_cross_border=result.is_cross_border,
        message=result.message,
        replayed=result.replayed,
    )
