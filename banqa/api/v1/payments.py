"""Wallet top-up endpoints (hosted checkout)."""

from fastapi import APIRouter

from banqa.api.deps import CurrentContext, DBSession
from banqa.schemas.payment import (
    ConfirmPaymentRequest,
    InitializePaymentRequest,
    InitializePaymentResponse,
)
from banqa.schemas.wallet import WalletSyncResponse
from banqa.services.notification_service import dispatch_audit
from banqa.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/initialize", response_model=InitializePaymentResponse)
async def initialize_payment(
    request: InitializePaymentRequest,
    session: DBSession,
    ctx: CurrentContext,
):
    """
    Prepare a checkout for topping up the caller's NGN wallet.

    Returns the descriptor the checkout widget is opened with and the
    ``tx_ref`` that will identify the payment on confirmation.
    """
    checkout = await PaymentService().initialize_payment(session, ctx, request.amount)
    return InitializePaymentResponse(
        payment_data=checkout.payment_data,
        reference=checkout.reference,
    )


@router.post("/confirm", response_model=WalletSyncResponse)
async def confirm_payment(
    request: ConfirmPaymentRequest,
    session: DBSession,
    ctx: CurrentContext,
):
    """
    Verify a completed checkout and credit the wallet.

    Safe to call more than once for the same checkout: the wallet is
    credited only the first time.
    """
    async with session.begin():
        result = await PaymentService().confirm_payment(session, ctx, request.transaction_id)

    if not result.replayed:
        dispatch_audit(
            str(result.transaction_id),
            {
                "kind": "wallet_topup",
                "user_id": str(ctx.user_id),
                "amount": str(result.new_balance - result.previous_balance),
                "currency": result.currency,
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
