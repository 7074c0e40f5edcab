"""Unit tests for peer-to-peer and cross-border transfers."""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select

from banqa.core.context import RequestContext
from banqa.core.exceptions import InsufficientFundsError, NotFoundError, ValidationError
from banqa.models import MoneyTransfer, Notification, Transaction, TransactionType
from banqa.services.ledger_service import LedgerService
from banqa.services.transfer_service import TransferService, generate_transfer_reference
from support import add_currencies, add_profile, add_wallet


@pytest.fixture
def service() -> TransferService:
    return TransferService()


class TestFindRecipient:
    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive(self, session, service) -> None:
        caller = await add_profile(session)
        target = await add_profile(session, full_name="Bola Ade", recipient_code="BQ12345678")

        found = await service.find_recipient(session, RequestContext(caller.id), " bq12345678 ")

        assert found.id == target.id
        assert found.full_name == "Bola Ade"

    @pytest.mark.asyncio
    async def test_own_code_is_rejected(self, session, service) -> None:
        caller = await add_profile(session, recipient_code="BQ11112222")

        with pytest.raises(ValidationError, match="yourself"):
            await service.find_recipient(session, RequestContext(caller.id), "BQ11112222")

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_found(self, session, service) -> None:
        caller = await add_profile(session)

        with pytest.raises(NotFoundError) as exc_info:
            await service.find_recipient(session, RequestContext(caller.id), "BQ99999999")
        assert exc_info.value.message == "No user found with this Banqa ID"

    @pytest.mark.asyncio
    async def test_malformed_code_is_rejected(self, session, service) -> None:
        caller = await add_profile(session)

        with pytest.raises(ValidationError, match="Invalid Banqa ID"):
            await service.find_recipient(session, RequestContext(caller.id), "BQ123")


class TestQuote:
    @pytest.mark.asyncio
    async def test_quote_uses_rate_ratio(self, session, service) -> None:
        await add_currencies(session)

        quote = await service.quote(session, Decimal("1000"), "NGN", "ghs")

        assert quote.exchange_rate == Decimal("12.5")
        assert quote.converted_amount == Decimal("12500")
        assert quote.transfer_fee == Decimal("125")
        assert quote.total_deducted == Decimal("1125")
        assert quote.is_cross_border

    @pytest.mark.asyncio
    async def test_inactive_currency_is_rejected(self, session, service) -> None:
        await add_currencies(session)

        with pytest.raises(ValidationError, match="Invalid currency codes"):
            await service.quote(session, Decimal("1000"), "NGN", "KES")

    @pytest.mark.asyncio
    async def test_active_currencies_exclude_inactive(self, session, service) -> None:
        await add_currencies(session)

        currencies = await service.list_active_currencies(session)

        assert [c.code for c in currencies] == ["GHS", "NGN"]


class TestValidateAmount:
    @pytest.mark.parametrize(
        "amount, message",
        [
            (Decimal("0"), "Please enter a valid amount"),
            (Decimal("-5"), "Please enter a valid amount"),
            (Decimal("99.99"), "Minimum transfer amount"),
            (Decimal("5000000.01"), "Maximum transfer amount"),
        ],
    )
    def test_out_of_range_amounts(self, service, amount, message) -> None:
        with pytest.raises(ValidationError, match=message):
            service.validate_amount(amount)

    def test_bounds_are_inclusive(self, service) -> None:
        service.validate_amount(Decimal("100"))
        service.validate_amount(Decimal("5000000"))


class TestProcessTransfer:
    @pytest.mark.asyncio
    async def test_cross_border_transfer_moves_both_legs(self, session, service) -> None:
        await add_currencies(session)
        sender = await add_profile(session, full_name="Ada Obi")
        recipient = await add_profile(session, full_name="Kofi Mensah")
        await add_wallet(session, sender.id, "5000")

        result = await service.process_transfer(
            session,
            RequestContext(sender.id),
            recipient.id,
            Decimal("1000"),
            sender_currency="NGN",
            recipient_currency="GHS",
        )
        await session.commit()

        ledger = LedgerService()
        assert await ledger.get_balance(session, sender.id, "NGN") == Decimal("3875")
        assert await ledger.get_balance(session, recipient.id, "GHS") == Decimal("12500")
        assert result.total_deducted == Decimal("1125")
        assert result.amount_received == Decimal("12500")
        assert result.recipient_name == "Kofi Mensah"
        assert result.is_cross_border
        assert result.message == (
            "Cross-border transfer completed successfully from Nigeria to Ghana"
        )
        assert result.reference_number.startswith("CBT")

    @pytest.mark.asyncio
    async def test_transfer_records_two_legs_under_one_reference(self, session, service) -> None:
        await add_currencies(session)
        sender = await add_profile(session)
        recipient = await add_profile(session)
        await add_wallet(session, sender.id, "5000")

        result = await service.process_transfer(
            session, RequestContext(sender.id), recipient.id, Decimal("1000")
        )
        await session.commit()

        rows = (
            await session.execute(
                select(Transaction).where(Transaction.reference_number == result.reference_number)
            )
        ).scalars().all()
        by_type = {row.transaction_type: row for row in rows}
        assert set(by_type) == {
            TransactionType.MONEY_TRANSFER_SENT,
            TransactionType.MONEY_TRANSFER_RECEIVED,
        }
        assert by_type[TransactionType.MONEY_TRANSFER_SENT].amount == Decimal("-1010")
        assert by_type[TransactionType.MONEY_TRANSFER_SENT].user_id == sender.id
        assert by_type[TransactionType.MONEY_TRANSFER_RECEIVED].amount == Decimal("1000")
        assert result.message == "Money transfer completed successfully"

        titles = set(
            (await session.execute(select(Notification.title))).scalars().all()
        )
        assert titles == {"Money Sent Successfully", "Money Received"}

    @pytest.mark.asyncio
    async def test_insufficient_balance_changes_nothing(self, session, service) -> None:
        await add_currencies(session)
        sender = await add_profile(session)
        recipient = await add_profile(session)
        await add_wallet(session, sender.id, "1000")
        await add_wallet(session, recipient.id, "0")
        sender_id, recipient_id = sender.id, recipient.id

        with pytest.raises(InsufficientFundsError) as exc_info:
            await service.process_transfer(
                session, RequestContext(sender_id), recipient_id, Decimal("1000")
            )
        await session.rollback()

        assert exc_info.value.message == "Insufficient balance for cross-border transfer"
        ledger = LedgerService()
        assert await ledger.get_balance(session, sender_id) == Decimal("1000")
        assert await ledger.get_balance(session, recipient_id) == Decimal("0")
        assert (await session.execute(select(MoneyTransfer))).first() is None

    @pytest.mark.asyncio
    async def test_repeated_request_id_replays_original(self, session, service) -> None:
        await add_currencies(session)
        sender = await add_profile(session)
        recipient = await add_profile(session)
        await add_wallet(session, sender.id, "5000")
        ctx = RequestContext(sender.id)

        first = await service.process_transfer(
            session, ctx, recipient.id, Decimal("500"), request_id="req-1"
        )
        await session.commit()
        second = await service.process_transfer(
            session, ctx, recipient.id, Decimal("500"), request_id="req-1"
        )
        await session.commit()

        assert second.replayed is True
        assert second.transfer_id == first.transfer_id
        assert second.reference_number == first.reference_number
        assert second.message == "Money transfer already processed"
        assert await LedgerService().get_balance(session, sender.id) == Decimal("4495")

    @pytest.mark.asyncio
    async def test_self_transfer_is_rejected(self, session, service) -> None:
        sender = await add_profile(session)

        with pytest.raises(ValidationError, match="yourself"):
            await service.process_transfer(
                session, RequestContext(sender.id), sender.id, Decimal("500")
            )

    @pytest.mark.asyncio
    async def test_unknown_recipient_is_not_found(self, session, service) -> None:
        await add_currencies(session)
        sender = await add_profile(session)

        with pytest.raises(NotFoundError, match="Recipient not found"):
            await service.process_transfer(
                session, RequestContext(sender.id), uuid.uuid4(), Decimal("500")
            )


def test_transfer_reference_format() -> None:
    reference = generate_transfer_reference()

    assert reference.startswith("CBT")
    assert reference[3:-9].isdigit()
    assert len(reference[-9:]) == 9
    assert reference[-9:].isalnum() and reference[-9:].upper() == reference[-9:]
