# SQLAlchemy ORM Models
"""Model package exports for Alembic discovery and application use.

All models must be imported here to ensure Alembic can discover them
for automatic migration generation.
"""

from banqa.models.bank_account import BankAccount
from banqa.models.currency import Currency
from banqa.models.notification import Notification
from banqa.models.profile import Profile
from banqa.models.service import BillService
from banqa.models.transaction import Transaction, TransactionStatus, TransactionType
from banqa.models.transfer import MoneyTransfer
from banqa.models.wallet import Wallet
from banqa.models.withdrawal import (
    WithdrawalOtp,
    WithdrawalPin,
    WithdrawalRequest,
    WithdrawalStatus,
)

__all__ = [
    "BankAccount",
    "BillService",
    "Currency",
    "MoneyTransfer",
    "Notification",
    "Profile",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "Wallet",
    "WithdrawalOtp",
    "WithdrawalPin",
    "WithdrawalRequest",
    "WithdrawalStatus",
]
