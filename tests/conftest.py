"""
Shared fixtures and stub providers for the enrichment engine tests.
"""

from typing import Dict, Iterable, List, Optional
from unittest.mock import AsyncMock

import pytest

from enrichment_core.credit_ledger import ChargeReceipt, CreditLedger, InMemoryCreditLedger
from enrichment_core.enrich_providers.base import (
    BaseDataProvider,
    PaginatedResponse,
    ProviderCapability,
    ProviderResponse,
    UnifiedCompany,
)


class StubProvider(BaseDataProvider):
    """Provider returning canned responses and recording every call."""

    base_url = "https://stub.example.com"

    def __init__(
        self,
        name: str,
        capabilities: Iterable[ProviderCapability],
        responses: Optional[Dict[ProviderCapability, ProviderResponse]] = None,
        raises: Optional[Exception] = None,
    ):
        self.name = name
        self.display_name = name.title()
        self.capabilities = frozenset(capabilities)
        super().__init__(api_key="test-key")
        self.responses = responses or {}
        self.raises = raises
        self.calls: List[tuple] = []

    def get_auth_headers(self) -> Dict[str, str]:
        return {}

    async def _respond(self, capability: ProviderCapability, params):
        self.calls.append((capability, params))
        if self.raises is not None:
            raise self.raises
        if capability in self.responses:
            return self.responses[capability]
        if capability in (ProviderCapability.COMPANY_SEARCH, ProviderCapability.PEOPLE_SEARCH):
            return PaginatedResponse.failure("No stubbed response")
        return ProviderResponse.failure("No stubbed response")

    async def search_companies(self, params):
        return await self._respond(ProviderCapability.COMPANY_SEARCH, params)

    async def enrich_company(self, params):
        return await self._respond(ProviderCapability.COMPANY_ENRICH, params)

    async def search_people(self, params):
        return await self._respond(ProviderCapability.PEOPLE_SEARCH, params)

    async def enrich_person(self, params):
        return await self._respond(ProviderCapability.PEOPLE_ENRICH, params)

    async def find_email(self, params):
        return await self._respond(ProviderCapability.EMAIL_FIND, params)

    async def verify_email(self, params):
        return await self._respond(ProviderCapability.EMAIL_VERIFY, params)


def company_response(quality: float, credits: float = 1, **company_fields) -> ProviderResponse:
    company_fields.setdefault("name", "")
    return ProviderResponse(
        success=True,
        data=UnifiedCompany(**company_fields),
        credits_consumed=credits,
        quality_score=quality,
    )


def company_provider(name: str, response: ProviderResponse) -> StubProvider:
    return StubProvider(
        name,
        [ProviderCapability.COMPANY_ENRICH],
        {ProviderCapability.COMPANY_ENRICH: response},
    )


@pytest.fixture
def mock_ledger():
    """Ledger that always has balance and accepts every charge."""
    ledger = AsyncMock(spec=CreditLedger)
    ledger.has_balance.return_value = True
    ledger.charge.return_value = ChargeReceipt(
        client_id="client-1", base_cost=1, margin_amount=0, total_charged=1, balance_after=99
    )
    return ledger


@pytest.fixture
def broke_ledger():
    """Ledger that never has balance."""
    ledger = AsyncMock(spec=CreditLedger)
    ledger.has_balance.return_value = False
    return ledger


@pytest.fixture
def memory_ledger():
    ledger = InMemoryCreditLedger()
    ledger.open_account("client-1", balance=100)
    return ledger
