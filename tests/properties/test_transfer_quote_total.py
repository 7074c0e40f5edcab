"""Property-based tests for transfer pricing."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from hypothesis import given, settings, strategies as st

from banqa.core.pricing import MONEY_QUANTUM, quote_transfer


@dataclass(frozen=True)
class Rated:
    code: str
    exchange_rate_to_base: Decimal


amounts = st.decimals(min_value=Decimal("100"), max_value=Decimal("5000000"), places=4)
rates = st.decimals(min_value=Decimal("0.0001"), max_value=Decimal("2000"), places=8)
fee_rates = st.decimals(min_value=Decimal("0"), max_value=Decimal("0.1"), places=4)


@settings(max_examples=200)
@given(amount=amounts, sender_rate=rates, recipient_rate=rates, fee_rate=fee_rates)
def test_total_is_amount_plus_fee(
    amount: Decimal, sender_rate: Decimal, recipient_rate: Decimal, fee_rate: Decimal
) -> None:
    """
    *For any* amount, pair of rates and fee rate, the total deducted SHALL
    equal the amount plus the fee, and the fee SHALL never be negative.
    """
    quote = quote_transfer(
        amount, Rated("NGN", sender_rate), Rated("GHS", recipient_rate), fee_rate
    )

    assert quote.total_deducted == quote.amount + quote.transfer_fee
    assert quote.transfer_fee >= 0
    assert quote.converted_amount == quote.converted_amount.quantize(MONEY_QUANTUM)
    assert quote.transfer_fee == quote.transfer_fee.quantize(MONEY_QUANTUM)


@settings(max_examples=200)
@given(amount=amounts, rate=rates)
def test_same_currency_converts_one_to_one(amount: Decimal, rate: Decimal) -> None:
    """
    *For any* amount sent within one currency, the recipient SHALL receive
    exactly the amount and the fee SHALL be 1% of it.
    """
    currency = Rated("NGN", rate)

    quote = quote_transfer(amount, currency, currency)

    assert quote.exchange_rate == 1
    assert quote.converted_amount == amount
    assert quote.transfer_fee == (amount * Decimal("0.01")).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    assert not quote.is_cross_border


@settings(max_examples=200)
@given(amount=amounts, sender_rate=rates, recipient_rate=rates)
def test_exchange_rate_is_ratio_of_base_rates(
    amount: Decimal, sender_rate: Decimal, recipient_rate: Decimal
) -> None:
    """
    *For any* pair of currencies, the exchange rate SHALL be the recipient's
    base rate divided by the sender's.
    """
    quote = quote_transfer(amount, Rated("NGN", sender_rate), Rated("GHS", recipient_rate))

    assert quote.exchange_rate == recipient_rate / sender_rate
    assert quote.is_cross_border
