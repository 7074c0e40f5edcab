# Pydantic Data Transfer Objects

from banqa.schemas.bank_account import BankAccountCreate, BankAccountRead
from banqa.schemas.bill import BillPayRequest, BillPayResponse, BillVerifyRequest, BillVerifyResponse
from banqa.schemas.notification import NotificationCreate, NotificationRead
from banqa.schemas.payment import ConfirmPaymentRequest, InitializePaymentRequest
from banqa.schemas.transaction import TransactionRead
from banqa.schemas.transfer import QuoteRequest, QuoteResponse, TransferRequest, TransferResponse
from banqa.schemas.wallet import WalletRead, WalletSyncRequest, WalletSyncResponse
from banqa.schemas.withdrawal import SetPinRequest, WithdrawalActionRequest

__all__ = [
    "BankAccountCreate",
    "BankAccountRead",
    "BillPayRequest",
    "BillPayResponse",
    "BillVerifyRequest",
    "BillVerifyResponse",
    "ConfirmPaymentRequest",
    "InitializePaymentRequest",
    "NotificationCreate",
    "NotificationRead",
    "QuoteRequest",
    "QuoteResponse",
    "SetPinRequest",
    "TransactionRead",
    "TransferRequest",
    "TransferResponse",
    "WalletRead",
    "WalletSyncRequest",
    "WalletSyncResponse",
    "WithdrawalActionRequest",
]
