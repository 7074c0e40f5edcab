"""Recipient identifiers and transfer pricing.

Pure functions shared by the server-side transfer service and the
client-side transfer flow, so both compute the same numbers:

    exchange_rate  = recipient.exchange_rate_to_base / sender.exchange_rate_to_base
    converted      = amount * exchange_rate
    fee            = converted * fee_rate
    total_deducted = amount + fee

The fee is taken from the converted (destination-currency) amount and
added to the source amount as-is. Sending 1000 NGN to GHS at rate 12.5
deducts 1125 and credits 12500.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from banqa.core.exceptions import ValidationError

RECIPIENT_CODE_PATTERN = re.compile(r"[A-Z]{2}[0-9]{8}")
MONEY_QUANTUM = Decimal("0.0001")
DEFAULT_FEE_RATE = Decimal("0.01")


class RatedCurrency(Protocol):
    code: str
    exchange_rate_to_base: Decimal


def normalize_recipient_code(raw: str) -> str:
    """Uppercase and validate a recipient identifier such as ``bq12345678``.

    Raises:
        ValidationError: If the value is not two letters followed by 8 digits
    """
    code = (raw or "").strip().upper()
    if not RECIPIENT_CODE_PATTERN.fullmatch(code):
        raise ValidationError(
            "Invalid Banqa ID. It must be two letters followed by 8 digits, e.g. BQ12345678"
        )
    return code


@dataclass(frozen=True)
class TransferQuote:
    amount: Decimal
    sender_currency: str
    recipient_currency: str
    exchange_rate: Decimal
    converted_amount: Decimal
    transfer_fee: Decimal
    total_deducted: Decimal

    @property
    def is_cross_border(self) -> bool:
        return self.sender_currency != self.recipient_currency


def quote_transfer(
    amount: Decimal,
    sender_currency: RatedCurrency,
    recipient_currency: RatedCurrency,
    fee_rate: Decimal = DEFAULT_FEE_RATE,
) -> TransferQuote:
    """Compute conversion, fee and total deduction for a transfer."""
    exchange_rate = recipient_currency.exchange_rate_to_base / sender_currency.exchange_rate_to_base
    converted = (amount * exchange_rate).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    fee = (converted * fee_rate).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    return TransferQuote(
        amount=amount,
        sender_currency=sender_currency.code,
        recipient_currency=recipient_currency.code,
        exchange_rate=exchange_rate,
        converted_amount=converted,
        transfer_fee=fee,
        total_deducted=amount + fee,
    )
