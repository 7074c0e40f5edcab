"""Wallet ledger endpoints."""

from fastapi import APIRouter, Query
from sqlalchemy.exc import IntegrityError

from banqa.api.deps import CurrentContext, DBSession, ServiceContext
from banqa.schemas.transaction import TransactionHistoryResponse, TransactionRead
from banqa.schemas.wallet import (
    WalletBalancesResponse,
    WalletRead,
    WalletSyncRequest,
    WalletSyncResponse,
)
from banqa.services.ledger_service import LedgerService
from banqa.services.notification_service import dispatch_audit

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.post("/sync", response_model=WalletSyncResponse, status_code=200)
async def sync_wallet(
    request: WalletSyncRequest,
    session: DBSession,
    ctx: ServiceContext,
):
    """
    Apply a signed amount to a wallet and record the transaction.

    Restricted to internal services; end-user tokens get 403. User top-ups
    go through ``/payments/confirm``, which verifies the checkout first.

    - **user_id**: wallet owner; defaults to the token subject
    - **amount**: positive to credit, negative to debit
    - **transaction_type**: recorded on the transaction row
    - **reference**: optional; repeats with the same reference change nothing

    The balance change and the transaction row commit together.
    """
    user_id = request.user_id or ctx.user_id
    ledger = LedgerService()
    try:
        async with session.begin():
            result = await ledger.sync_wallet(
                session,
                user_id,
                request.amount,
                request.transaction_type,
                currency=request.currency,
                reference=request.reference,
                metadata=request.metadata,
            )
    except IntegrityError:
        # A concurrent sync with the same reference committed first
        await session.rollback()
        result = None
        if request.reference:
            result = await ledger.replay_sync(session, user_id, request.reference)
        if result is None:
            raise

    # Committed; side effects may be queued now
    if not result.replayed:
        dispatch_audit(
            str(result.transaction_id),
            {
                "kind": "wallet_sync",
                "user_id": str(user_id),
                "amount": str(request.amount),
                "currency": result.currency,
                "transaction_type": request.transaction_type.value,
                "status": "completed",
            },
        )

    return WalletSyncResponse(
        new_balance=result.new_balance,
        previous_balance=result.previous_balance,
        currency=result.currency,
        transaction_id=result.transaction_id,
        replayed=result.replayed,
    )


@router.get("/balances", response_model=WalletBalancesResponse)
async def list_balances(session: DBSession, ctx: CurrentContext):
    wallets = await LedgerService().list_wallets(session, ctx.user_id)
    return WalletBalancesResponse(wallets=[WalletRead.model_validate(w) for w in wallets])


@router.get("/transactions", response_model=TransactionHistoryResponse)
async def list_transactions(
    session: DBSession,
    ctx: CurrentContext,
    limit: int = Query(default=50, ge=1, le=200),
):
    transactions = await LedgerService().list_transactions(session, ctx.user_id, limit=limit)
    return TransactionHistoryResponse(
        transactions=[TransactionRead.model_validate(t) for t in transactions]
    )
