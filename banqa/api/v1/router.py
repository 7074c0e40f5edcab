"""API v1 router aggregation."""

from fastapi import APIRouter

from banqa.api.v1 import (
    bank_accounts,
    bills,
    notifications,
    payments,
    telecom,
    transfers,
    wallet,
    withdrawals,
)

api_router = APIRouter()

# Include all v1 routers
api_router.include_router(payments.router)
api_router.include_router(wallet.router)
api_router.include_router(transfers.router)
api_router.include_router(withdrawals.router)
api_router.include_router(bills.router)
api_router.include_router(bank_accounts.router)
api_router.include_router(notifications.router)
api_router.include_router(telecom.router)
