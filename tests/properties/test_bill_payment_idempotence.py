"""Property-based tests for bill payment idempotence."""

import asyncio
from decimal import Decimal

from hypothesis import given, settings, strategies as st

from banqa.core.context import RequestContext
from banqa.models import TransactionStatus
from banqa.providers.billing import SimulatedBillProvider
from banqa.services.bill_service import BillPaymentService
from banqa.services.ledger_service import LedgerService
from support import add_profile, add_service, add_wallet, session_scope


@settings(max_examples=20, deadline=None)
@given(
    amount=st.decimals(min_value=Decimal("1"), max_value=Decimal("5000"), places=2),
    submissions=st.integers(min_value=1, max_value=4),
    succeeds=st.booleans(),
)
def test_reference_is_charged_at_most_once(amount: Decimal, submissions: int, succeeds: bool) -> None:
    """
    *For any* bill submitted repeatedly with one reference id, the wallet
    SHALL be debited once if the provider accepted it and never otherwise,
    and every submission SHALL report the same transaction.
    """

    async def scenario() -> None:
        async with session_scope() as session:
            profile = await add_profile(session)
            await add_wallet(session, profile.id, "10000")
            await add_service(session)
            provider = SimulatedBillProvider(success_rate=1.0 if succeeds else 0.0)
            service = BillPaymentService(provider_factory=lambda service_type: provider)
            ctx = RequestContext(profile.id)

            results = [
                await service.pay_bill(
                    session, ctx, "electricity", "IKEDC", amount,
                    {"meter_number": "45012345678"}, reference_id="BILL-SAME",
                )
                for _ in range(submissions)
            ]

            assert len({r.transaction_id for r in results}) == 1
            assert all(r.replayed for r in results[1:])
            expected_status = TransactionStatus.COMPLETED if succeeds else TransactionStatus.FAILED
            assert all(r.status == expected_status for r in results)

            debited = amount if succeeds else Decimal("0")
            assert await LedgerService().get_balance(session, profile.id) == Decimal("10000") - debited

    asyncio.run(scenario())
