"""
Tests for the in-memory credit ledger.
"""

import pytest

from enrichment_core.credit_ledger import (
    ChargeRequest,
    ClientNotFoundError,
    InMemoryCreditLedger,
    InsufficientCreditsError,
)


def _request(cost: float) -> ChargeRequest:
    return ChargeRequest(
        base_cost=cost,
        source="apollo",
        operation="company_enrich",
        description="Company enrichment: acme.com",
    )


class TestInMemoryCreditLedger:
    """Balance checks, margin, and transaction log."""

    @pytest.fixture
    def ledger(self):
        ledger = InMemoryCreditLedger()
        ledger.open_account("client-1", balance=10, margin_percent=20)
        return ledger

    @pytest.mark.asyncio
    async def test_has_balance(self, ledger):
        assert await ledger.has_balance("client-1", 10)
        assert not await ledger.has_balance("client-1", 10.5)
        assert not await ledger.has_balance("unknown", 0)

    @pytest.mark.asyncio
    async def test_charge_applies_margin(self, ledger):
        receipt = await ledger.charge("client-1", _request(1.0))

        assert receipt.margin_amount == pytest.approx(0.2)
        assert receipt.total_charged == pytest.approx(1.2)
        assert receipt.balance_after == pytest.approx(8.8)
        assert await ledger.get_balance("client-1") == pytest.approx(8.8)

        [transaction] = await ledger.get_transactions("client-1")
        assert transaction.type == "usage"
        assert transaction.amount == pytest.approx(-1.2)
        assert transaction.data_source == "apollo"
        assert transaction.operation_type == "company_enrich"

    @pytest.mark.asyncio
    async def test_charge_refuses_to_go_negative(self, ledger):
        with pytest.raises(InsufficientCreditsError) as exc_info:
            await ledger.charge("client-1", _request(9.0))

        assert exc_info.value.required == pytest.approx(10.8)
        assert exc_info.value.available == pytest.approx(10)
        assert await ledger.get_balance("client-1") == pytest.approx(10)
        assert await ledger.get_transactions("client-1") == []

    @pytest.mark.asyncio
    async def test_unknown_client(self, ledger):
        with pytest.raises(ClientNotFoundError):
            await ledger.charge("nobody", _request(1.0))

    @pytest.mark.asyncio
    async def test_add_credits(self, ledger):
        balance = await ledger.add_credits("client-1", 5, "purchase", "Top-up")

        assert balance == pytest.approx(15)
        [transaction] = await ledger.get_transactions("client-1")
        assert transaction.type == "purchase"

        with pytest.raises(ValueError):
            await ledger.add_credits("client-1", 5, "gift", "Not a known type")

    @pytest.mark.asyncio
    async def test_transactions_are_paginated(self, ledger):
        for _ in range(3):
            await ledger.charge("client-1", _request(0.5))

        page = await ledger.get_transactions("client-1", limit=2, offset=1)

        assert len(page) == 2
        assert page[-1].balance_after == pytest.approx(10 - 3 * 0.6)
