"""Client-side send-money flow.

    RECIPIENT_SEARCH -> AMOUNT_ENTRY -> PIN_VERIFICATION -> SUBMISSION -> SUCCESS
                                                                     \\-> FAILURE

Each step validates locally first and only then makes its single remote
call. Errors returned by the server are surfaced with the server's message.
The balance check in ``enter_amount`` is advisory; the server re-validates
the balance when the transfer is submitted.
"""

import enum
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from banqa.client.api_client import ApiError, BanqaApiClient
from banqa.core.exceptions import ValidationError
from banqa.core.pricing import DEFAULT_FEE_RATE, TransferQuote, normalize_recipient_code, quote_transfer

logger = logging.getLogger(__name__)

MAX_SEARCH_ATTEMPTS = 5


class FlowState(str, enum.Enum):
    RECIPIENT_SEARCH = "recipient_search"
    AMOUNT_ENTRY = "amount_entry"
    PIN_VERIFICATION = "pin_verification"
    SUBMISSION = "submission"
    SUCCESS = "success"
    FAILURE = "failure"


class TransferFlowError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    name: str
    symbol: str
    country: str
    exchange_rate_to_base: Decimal

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CurrencyInfo":
        return cls(
            code=payload["code"],
            name=payload.get("name", payload["code"]),
            symbol=payload.get("symbol", ""),
            country=payload.get("country", ""),
            exchange_rate_to_base=Decimal(str(payload["exchange_rate_to_base"])),
        )


@dataclass(frozen=True)
class TransferOutcome:
    recipient_name: str
    converted_amount: Decimal
    recipient_currency: str
    reference_number: str
    message: str


class TransferFlow:
    """State machine for one send-money attempt.

    Args:
        api: Authenticated API client
        own_recipient_code: The sender's own Banqa ID, used to reject
            self-transfers without a remote call
        sender_currency: Currency of the wallet being debited
        fee_rate: Fee fraction of the converted amount
        request_id_factory: Produces the idempotency id sent on submission
    """

    def __init__(
        self,
        api: BanqaApiClient,
        own_recipient_code: str,
        sender_currency: str = "NGN",
        fee_rate: Decimal = DEFAULT_FEE_RATE,
        request_id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.api = api
        self.own_recipient_code = own_recipient_code.strip().upper()
        self.sender_currency = sender_currency
        self.fee_rate = fee_rate
        self.request_id_factory = request_id_factory

        self.state = FlowState.RECIPIENT_SEARCH
        self.search_attempts = 0
        self.recipient: dict[str, Any] | None = None
        self.currencies: dict[str, CurrencyInfo] = {}
        self.quote: TransferQuote | None = None
        self.request_id: str | None = None
        self.outcome: TransferOutcome | None = None
        self.error: str | None = None

    def _expect(self, *states: FlowState) -> None:
        if self.state not in states:
            raise TransferFlowError(f"Cannot do this while in {self.state.value}")

    async def search_recipient(self, recipient_code: str) -> dict[str, Any]:
        """Find the recipient for a Banqa ID; limited to 5 attempts per flow."""
        self._expect(FlowState.RECIPIENT_SEARCH)
        if self.search_attempts >= MAX_SEARCH_ATTEMPTS:
            raise TransferFlowError("Too many search attempts. Please try again later.")
        self.search_attempts += 1

        try:
            code = normalize_recipient_code(recipient_code)
        except ValidationError as e:
            raise TransferFlowError(e.message)
        if code == self.own_recipient_code:
            raise TransferFlowError("You cannot send money to yourself")

        try:
            recipient = await self.api.find_recipient(code)
        except ApiError as e:
            raise TransferFlowError(e.message)

        self.recipient = recipient
        self.state = FlowState.AMOUNT_ENTRY
        return recipient

    async def load_currencies(self) -> dict[str, CurrencyInfo]:
        if not self.currencies:
            try:
                payloads = await self.api.list_currencies()
            except ApiError as e:
                raise TransferFlowError(e.message)
            self.currencies = {p["code"]: CurrencyInfo.from_payload(p) for p in payloads}
        return self.currencies

    async def enter_amount(
        self,
        amount: Decimal | str,
        recipient_currency: str,
        balance: Decimal,
    ) -> TransferQuote:
        """Price the transfer and check it fits the sender's balance."""
        self._expect(FlowState.AMOUNT_ENTRY)
        try:
            amount = Decimal(str(amount))
        except InvalidOperation:
            raise TransferFlowError("Please enter a valid amount")
        if not amount.is_finite() or amount <= 0:
            raise TransferFlowError("Please enter a valid amount")

        currencies = await self.load_currencies()
        sender = currencies.get(self.sender_currency)
        recipient = currencies.get(recipient_currency.upper())
        if sender is None or recipient is None:
            raise TransferFlowError("Selected currency is not available")

        quote = quote_transfer(amount, sender, recipient, self.fee_rate)
        if quote.total_deducted > balance:
            raise TransferFlowError(
                f"Insufficient balance. You need {sender.code} {quote.total_deducted:,.2f} "
                f"but have {sender.code} {balance:,.2f}"
            )

        self.quote = quote
        self.state = FlowState.PIN_VERIFICATION
        return quote

    async def verify_pin(self, pin: str) -> None:
        self._expect(FlowState.PIN_VERIFICATION)
        try:
            await self.api.verify_pin(pin)
        except ApiError as e:
            raise TransferFlowError(e.message)
        self.state = FlowState.SUBMISSION

    async def submit(self, description: str | None = None) -> TransferOutcome:
        """Send the transfer in one remote call.

        The request id is fixed on the first submission of this flow, so
        submitting again after a failure cannot move the money twice.
        """
        self._expect(FlowState.SUBMISSION, FlowState.FAILURE)
        if self.request_id is None:
            self.request_id = self.request_id_factory()

        try:
            result = await self.api.process_transfer(
                recipient_id=self.recipient["id"],
                amount=self.quote.amount,
                sender_currency=self.quote.sender_currency,
                recipient_currency=self.quote.recipient_currency,
                description=description,
                request_id=self.request_id,
            )
        except ApiError as e:
            self.error = e.message
            self.state = FlowState.FAILURE
            logger.info("Transfer %s failed: %s", self.request_id, e.message)
            raise TransferFlowError(e.message)

        self.outcome = TransferOutcome(
            recipient_name=result.get("recipient_name") or self.recipient.get("full_name", ""),
            converted_amount=Decimal(str(result.get("amount_received", self.quote.converted_amount))),
            recipient_currency=self.quote.recipient_currency,
            reference_number=result.get("reference_number", ""),
            message=result.get("message", "Money transfer completed successfully"),
        )
        self.state = FlowState.SUCCESS
        return self.outcome
