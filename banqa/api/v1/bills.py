"""Bill payment endpoints."""

from fastapi import APIRouter

from banqa.api.deps import CurrentContext, DBSession
from banqa.schemas.bill import BillPayRequest, BillPayResponse, BillVerifyRequest, BillVerifyResponse
from banqa.services.bill_service import BillPaymentService
from banqa.services.notification_service import dispatch_audit

router = APIRouter(prefix="/bills", tags=["bills"])


@router.post("/verify", response_model=BillVerifyResponse)
async def verify_service_input(
    request: BillVerifyRequest,
    session: DBSession,
    ctx: CurrentContext,
):
    verification = await BillPaymentService().verify_service_input(
        session, request.service_type, request.provider_name, request.customer_data
    )
    return BillVerifyResponse(
        valid=verification.valid,
        message=verification.message,
        customer_info=verification.customer_info,
        amount_due=verification.amount_due,
    )


@router.post("/pay", response_model=BillPayResponse)
async def pay_bill(request: BillPayRequest, session: DBSession, ctx: CurrentContext):
    """
    Pay a bill from the caller's NGN wallet.

    The wallet is debited only when the provider accepts the payment. A
    failed payment is still recorded and returns ``success: false``.
    """
    # pay_bill commits in phases around the provider call
    result = await BillPaymentService().pay_bill(
        session,
        ctx,
        service_type=request.service_type,
        provider_name=request.provider_name,
        amount=request.amount,
        customer_data=request.customer_data,
        reference_id=request.reference_id,
    )

    if not result.replayed:
        dispatch_audit(
            str(result.transaction_id),
            {
                "kind": "bill_payment",
                "user_id": str(ctx.user_id),
                "service_type": request.service_type,
                "provider_name": request.provider_name,
                "amount": str(request.amount),
                "status": result.status.value,
            },
        )

    return BillPayResponse(
        success=result.success,
        status=result.status,
        transaction_id=result.transaction_id,
        message=result.message,
        replayed=result.replayed,
    )
