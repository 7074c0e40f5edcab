"""Unit tests for API route handlers.

Handlers are called directly with a mocked session and patched services.
They check that side effects are queued only after a money movement
commits, and never for replays or failures.
"""

import json
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt
from sqlalchemy.exc import IntegrityError

from banqa.api.deps import get_request_context, require_ledger_service
from banqa.api.v1.bills import pay_bill
from banqa.api.v1.transfers import process_transfer, verify_pin
from banqa.api.v1.wallet import router as wallet_router
from banqa.api.v1.wallet import sync_wallet
from banqa.api.v1.withdrawals import process_withdrawal
from banqa.core.context import RequestContext
from banqa.core.exceptions import (
    AuthenticationError,
    InsufficientFundsError,
    PermissionDeniedError,
    PinVerificationError,
    ValidationError,
)
from banqa.main import app, error_body
from banqa.models import TransactionStatus, TransactionType
from banqa.schemas.bill import BillPayRequest
from banqa.schemas.transfer import TransferRequest, VerifyPinRequest
from banqa.schemas.wallet import WalletSyncRequest
from banqa.schemas.withdrawal import WithdrawalActionRequest
from banqa.services.bill_service import BillPaymentResult
from banqa.services.ledger_service import SyncResult
from banqa.services.notification_service import OutboundEmail
from banqa.services.transfer_service import TransferResult
from banqa.services.withdrawal_service import WithdrawalOutcome


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock async session whose begin() is an async context manager."""
    session = AsyncMock()
    session.begin = MagicMock(return_value=AsyncMock())
    session.begin.return_value.__aenter__ = AsyncMock()
    session.begin.return_value.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=uuid.uuid4())


def transfer_result(replayed: bool = False) -> TransferResult:
    return TransferResult(
        transfer_id=uuid.uuid4(),
        reference_number="CBT1700000000000ABCDEFGHI",
        recipient_name="Kofi Mensah",
        amount_sent=Decimal("1000"),
        amount_received=Decimal("12500"),
        exchange_rate=Decimal("12.5"),
        transfer_fee=Decimal("125"),
        total_deducted=Decimal("1125"),
        sender_currency="NGN",
        recipient_currency="GHS",
        is_cross_border=True,
        message="Cross-border transfer completed successfully from Nigeria to Ghana",
        replayed=replayed,
    )


class TestTransferRoutes:
    @pytest.fixture
    def transfer_request(self) -> TransferRequest:
        return TransferRequest(
            recipient_id=uuid.uuid4(),
            amount=Decimal("1000"),
            recipient_currency="ghs",
            request_id="req-1",
        )

    @pytest.mark.asyncio
    async def test_completed_transfer_queues_audit(self, mock_session, ctx, transfer_request) -> None:
        result = transfer_result()
        with patch("banqa.api.v1.transfers.TransferService") as service_class, patch(
            "banqa.api.v1.transfers.dispatch_audit"
        ) as audit:
            service_class.return_value.process_transfer = AsyncMock(return_value=result)

            response = await process_transfer(transfer_request, mock_session, ctx)

        mock_session.begin.assert_called_once()
        call = service_class.return_value.process_transfer.call_args
        assert call.kwargs["recipient_currency"] == "GHS"
        assert call.kwargs["request_id"] == "req-1"
        audit.assert_called_once()
        transaction_id, data = audit.call_args.args
        assert transaction_id == str(result.transfer_id)
        assert data["kind"] == "money_transfer"
        assert data["sender_id"] == str(ctx.user_id)
        assert data["reference_number"] == result.reference_number
        assert response.total_deducted == Decimal("1125")
        assert response.model_dump()["total_deducted"] == "1125"

    @pytest.mark.asyncio
    async def test_replayed_transfer_is_not_audited_again(self, mock_session, ctx, transfer_request) -> None:
        with patch("banqa.api.v1.transfers.TransferService") as service_class, patch(
            "banqa.api.v1.transfers.dispatch_audit"
        ) as audit:
            service_class.return_value.process_transfer = AsyncMock(
                return_value=transfer_result(replayed=True)
            )

            response = await process_transfer(transfer_request, mock_session, ctx)

        audit.assert_not_called()
        assert response.replayed is True

    @pytest.mark.asyncio
    async def test_failed_transfer_queues_nothing(self, mock_session, ctx, transfer_request) -> None:
        with patch("banqa.api.v1.transfers.TransferService") as service_class, patch(
            "banqa.api.v1.transfers.dispatch_audit"
        ) as audit:
            service_class.return_value.process_transfer = AsyncMock(
                side_effect=InsufficientFundsError(
                    "w", Decimal("1125"), Decimal("100"),
                    message="Insufficient balance for cross-border transfer",
                )
            )

            with pytest.raises(InsufficientFundsError):
                await process_transfer(transfer_request, mock_session, ctx)

        audit.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_key_race_returns_replay(self, mock_session, ctx, transfer_request) -> None:
        replay = transfer_result(replayed=True)
        with patch("banqa.api.v1.transfers.TransferService") as service_class, patch(
            "banqa.api.v1.transfers.dispatch_audit"
        ) as audit:
            service_class.return_value.process_transfer = AsyncMock(
                side_effect=IntegrityError("INSERT", {}, Exception("uq_money_transfers_sender_request"))
            )
            service_class.return_value.replay_transfer = AsyncMock(return_value=replay)

            response = await process_transfer(transfer_request, mock_session, ctx)

        mock_session.rollback.assert_awaited_once()
        service_class.return_value.replay_transfer.assert_awaited_once_with(mock_session, ctx.user_id, "req-1")
        audit.assert_not_called()
        assert response.replayed is True
        assert response.transfer_id == replay.transfer_id

    @pytest.mark.asyncio
    async def test_integrity_error_without_request_id_propagates(self, mock_session, ctx) -> None:
        request = TransferRequest(recipient_id=uuid.uuid4(), amount=Decimal("1000"), recipient_currency="NGN")
        with patch("banqa.api.v1.transfers.TransferService") as service_class:
            service_class.return_value.process_transfer = AsyncMock(
                side_effect=IntegrityError("INSERT", {}, Exception("fk"))
            )

            with pytest.raises(IntegrityError):
                await process_transfer(request, mock_session, ctx)

    @pytest.mark.asyncio
    async def test_verify_pin_reports_success(self, mock_session, ctx) -> None:
        with patch("banqa.api.v1.transfers.TransferService") as service_class:
            service_class.return_value.verify_pin = AsyncMock(return_value=None)

            assert await verify_pin(VerifyPinRequest(pin="1234"), mock_session, ctx) == {"success": True}

    @pytest.mark.asyncio
    async def test_verify_pin_failure_propagates(self, mock_session, ctx) -> None:
        with patch("banqa.api.v1.transfers.TransferService") as service_class:
            service_class.return_value.verify_pin = AsyncMock(side_effect=PinVerificationError())

            with pytest.raises(PinVerificationError):
                await verify_pin(VerifyPinRequest(pin="0000"), mock_session, ctx)


class TestWithdrawalRoute:
    @pytest.mark.asyncio
    async def test_pin_step_sends_code_without_audit(self, mock_session, ctx) -> None:
        emails = [OutboundEmail(to="ada@example.com", subject="Withdrawal Verification Code", body="...")]
        request = WithdrawalActionRequest(
            action="verify_pin", amount=Decimal("1500"), bank_account_id=uuid.uuid4(), pin="1234"
        )
        with patch("banqa.api.v1.withdrawals.WithdrawalService") as service_class, patch(
            "banqa.api.v1.withdrawals.dispatch_emails"
        ) as send, patch("banqa.api.v1.withdrawals.dispatch_audit") as audit:
            service_class.return_value.process = AsyncMock(
                return_value=WithdrawalOutcome(message="OTP sent to your email address", emails=emails)
            )

            response = await process_withdrawal(request, mock_session, ctx)

        send.assert_called_once_with(emails)
        audit.assert_not_called()
        assert response.message == "OTP sent to your email address"
        assert response.reference_number is None

    @pytest.mark.asyncio
    async def test_withdraw_step_is_audited(self, mock_session, ctx) -> None:
        withdrawal_id = uuid.uuid4()
        request = WithdrawalActionRequest(
            action="verify_otp_and_withdraw",
            amount=Decimal("1500"),
            bank_account_id=uuid.uuid4(),
            otp_code="123456",
        )
        with patch("banqa.api.v1.withdrawals.WithdrawalService") as service_class, patch(
            "banqa.api.v1.withdrawals.dispatch_emails"
        ), patch("banqa.api.v1.withdrawals.dispatch_audit") as audit:
            service_class.return_value.process = AsyncMock(
                return_value=WithdrawalOutcome(
                    message="Withdrawal processed successfully",
                    reference_number="WD1700000000000",
                    withdrawal_id=withdrawal_id,
                )
            )

            response = await process_withdrawal(request, mock_session, ctx)

        audit.assert_called_once()
        assert audit.call_args.args[0] == str(withdrawal_id)
        assert audit.call_args.args[1]["reference_number"] == "WD1700000000000"
        assert response.reference_number == "WD1700000000000"


class TestBillRoute:
    @pytest.fixture
    def pay_request(self) -> BillPayRequest:
        return BillPayRequest(
            service_type="electricity",
            provider_name="IKEDC",
            amount=Decimal("1500"),
            customer_data={"meter_number": "45012345678"},
            reference_id="BILL-1",
        )

    @pytest.mark.asyncio
    async def test_settled_payment_is_audited_with_status(self, mock_session, ctx, pay_request) -> None:
        result = BillPaymentResult(
            success=False,
            status=TransactionStatus.FAILED,
            transaction_id=uuid.uuid4(),
            message="Payment failed",
        )
        with patch("banqa.api.v1.bills.BillPaymentService") as service_class, patch(
            "banqa.api.v1.bills.dispatch_audit"
        ) as audit:
            service_class.return_value.pay_bill = AsyncMock(return_value=result)

            response = await pay_bill(pay_request, mock_session, ctx)

        mock_session.begin.assert_not_called()
        assert audit.call_args.args[1]["status"] == "failed"
        assert response.success is False
        assert response.model_dump()["status"] == "failed"

    @pytest.mark.asyncio
    async def test_replayed_payment_is_not_audited(self, mock_session, ctx, pay_request) -> None:
        result = BillPaymentResult(
            success=True,
            status=TransactionStatus.COMPLETED,
            transaction_id=uuid.uuid4(),
            message="Payment processed successfully",
            replayed=True,
        )
        with patch("banqa.api.v1.bills.BillPaymentService") as service_class, patch(
            "banqa.api.v1.bills.dispatch_audit"
        ) as audit:
            service_class.return_value.pay_bill = AsyncMock(return_value=result)

            await pay_bill(pay_request, mock_session, ctx)

        audit.assert_not_called()


class TestWalletRoute:
    @pytest.fixture
    def service_ctx(self) -> RequestContext:
        return RequestContext(user_id=uuid.uuid4(), role="service_role")

    @pytest.mark.asyncio
    async def test_sync_commits_then_audits(self, mock_session, service_ctx) -> None:
        owner_id = uuid.uuid4()
        result = SyncResult(
            new_balance=Decimal("2500"),
            previous_balance=Decimal("0"),
            currency="NGN",
            transaction_id=uuid.uuid4(),
        )
        request = WalletSyncRequest(
            user_id=owner_id, amount=Decimal("2500"), transaction_type=TransactionType.CREDIT
        )
        with patch("banqa.api.v1.wallet.LedgerService") as service_class, patch(
            "banqa.api.v1.wallet.dispatch_audit"
        ) as audit:
            service_class.return_value.sync_wallet = AsyncMock(return_value=result)

            response = await sync_wallet(request, mock_session, service_ctx)

        mock_session.begin.assert_called_once()
        service_class.return_value.sync_wallet.assert_awaited_once()
        assert service_class.return_value.sync_wallet.call_args.args[1] == owner_id
        assert audit.call_args.args[0] == str(result.transaction_id)
        assert audit.call_args.args[1]["user_id"] == str(owner_id)
        assert response.model_dump()["new_balance"] == "2500"

    @pytest.mark.asyncio
    async def test_sync_defaults_to_token_subject(self, mock_session, service_ctx) -> None:
        request = WalletSyncRequest(amount=Decimal("-100"), transaction_type=TransactionType.DEBIT)
        with patch("banqa.api.v1.wallet.LedgerService") as service_class, patch(
            "banqa.api.v1.wallet.dispatch_audit"
        ):
            service_class.return_value.sync_wallet = AsyncMock(
                return_value=SyncResult(
                    new_balance=Decimal("0"),
                    previous_balance=Decimal("100"),
                    currency="NGN",
                    transaction_id=uuid.uuid4(),
                )
            )

            await sync_wallet(request, mock_session, service_ctx)

        assert service_class.return_value.sync_wallet.call_args.args[1] == service_ctx.user_id

    def test_sync_route_requires_ledger_service_role(self) -> None:
        route = next(r for r in wallet_router.routes if r.path == "/wallet/sync")

        assert require_ledger_service in [d.call for d in route.dependant.dependencies]

    def test_zero_amount_is_rejected_by_schema(self) -> None:
        with pytest.raises(ValueError):
            WalletSyncRequest(amount=Decimal("0"), transaction_type=TransactionType.CREDIT)


class TestRequestContext:
    @pytest.mark.asyncio
    async def test_missing_header_is_unauthorized(self) -> None:
        with pytest.raises(AuthenticationError, match="No authorization header"):
            await get_request_context(None)

    @pytest.mark.asyncio
    async def test_bearer_token_resolves_caller(self) -> None:
        user_id = uuid.uuid4()
        token = jwt.encode({"sub": str(user_id)}, "test-secret-key", algorithm="HS256")

        ctx = await get_request_context(
            HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
        )

        assert ctx.user_id == user_id
        assert ctx.access_token == token
        assert ctx.role == "authenticated"

    @pytest.mark.asyncio
    async def test_role_claim_is_carried(self) -> None:
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "role": "service_role"}, "test-secret-key", algorithm="HS256"
        )

        ctx = await get_request_context(
            HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
        )

        assert ctx.role == "service_role"

    @pytest.mark.asyncio
    async def test_user_token_cannot_sync_wallet(self, ctx) -> None:
        with pytest.raises(PermissionDeniedError) as exc_info:
            await require_ledger_service(ctx)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_service_token_can_sync_wallet(self) -> None:
        service_ctx = RequestContext(user_id=uuid.uuid4(), role="service_role")

        assert await require_ledger_service(service_ctx) is service_ctx


class TestErrorBody:
    def test_envelope_carries_message_and_type(self) -> None:
        body = error_body(PinVerificationError())

        assert body == {
            "success": False,
            "error": "Invalid withdrawal PIN",
            "error_type": "PinVerificationError",
        }

    def test_missing_fields_are_included(self) -> None:
        body = error_body(ValidationError("Missing required fields", missing_fields=["meter_number"]))

        assert body["missing_fields"] == ["meter_number"]
        assert ValidationError("x").status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_body_is_a_400_envelope(self) -> None:
        handler = app.exception_handlers[RequestValidationError]
        exc = RequestValidationError([
            {"type": "missing", "loc": ("body", "amount"), "msg": "Field required", "input": {}},
        ])

        response = await handler(MagicMock(), exc)

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "success": False,
            "error": "Invalid request",
            "error_type": "ValidationError",
            "missing_fields": ["amount"],
        }
