"""
Source orchestrator for the enrichment engine.

This module holds the provider registry and drives requests across providers:

- enrich_company / enrich_person run a credit-gated waterfall that merges
  partial records in priority order until the quality threshold and the
  required fields are satisfied, or max_providers have contributed.
- search_companies / search_people / find_email / verify_email return the
  first usable answer from a single provider, without merging.

Provider failures never abort a request; ledger failures always do.
"""

import copy
import logging
import time
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

import httpx

from .config import Settings, settings as default_settings
from .credit_ledger import ChargeRequest, CreditLedger
from .enrich_providers import (
    ApolloProvider,
    BaseDataProvider,
    CompanyEnrichParams,
    CompanySearchParams,
    EmailFindParams,
    EmailFindResult,
    EmailVerificationResult,
    EmailVerifyParams,
    LeadMagicProvider,
    PaginatedResponse,
    PeopleEnrichParams,
    PeopleSearchParams,
    ProspeoProvider,
    ProviderCapability,
    ProviderResponse,
    UnifiedCompany,
    UnifiedContact,
)
from .metrics import CREDITS_CHARGED, PROVIDER_CALLS, PROVIDER_LATENCY

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PAGINATED_CAPABILITIES = {
    ProviderCapability.COMPANY_SEARCH,
    ProviderCapability.PEOPLE_SEARCH,
}


@dataclass
class WaterfallConfig:
    """Per-call waterfall policy."""

    quality_threshold: float = field(
        default_factory=lambda: default_settings.WATERFALL_QUALITY_THRESHOLD
    )
    max_providers: int = field(default_factory=lambda: default_settings.WATERFALL_MAX_PROVIDERS)
    required_fields: Optional[List[str]] = None

    def __post_init__(self):
        if not 0.0 <= self.quality_threshold <= 1.0:
            raise ValueError("quality_threshold must be between 0 and 1")
        if self.max_providers < 0:
            raise ValueError("max_providers cannot be negative")


@dataclass
class WaterfallResult(Generic[T]):
    """Outcome of an orchestrator call."""

    result: Optional[T]
    providers_used: List[str] = field(default_factory=list)
    total_cost: float = 0.0


def merge_records(primary: T, secondary: T) -> T:
    """
    Merge two partial records, first-non-empty-wins.

    The result starts as a shallow copy of `primary`. A field of `secondary`
    is copied only where the result holds None or "". `external_ids` is the
    union of both maps, with `secondary` winning on key collisions.
    """
    merged = copy.copy(primary)
    for f in fields(secondary):
        value = getattr(secondary, f.name)
        if f.name == "external_ids":
            merged.external_ids = {**(primary.external_ids or {}), **(value or {})}
            continue
        current = getattr(merged, f.name, None)
        if current is None or current == "":
            setattr(merged, f.name, value)
    return merged


def has_required_fields(record: Any, required_fields: Optional[List[str]]) -> bool:
    """True when every required field is populated (vacuously true without any)."""
    if not required_fields or record is None:
        return True
    for name in required_fields:
        value = getattr(record, name, None)
        if value is None or value == "":
            return False
    return True


def _has_data(data: Any) -> bool:
    if data is None:
        return False
    if isinstance(data, list):
        return len(data) > 0
    return True


def _empty_stats() -> Dict[str, Any]:
    return {
        "calls": 0,
        "success_count": 0,
        "failure_count": 0,
        "error_count": 0,
        "total_credits": 0.0,
        "quality_total": 0.0,
        "latency_total": 0.0,
        "last_error": None,
        "last_success": None,
    }


class SourceOrchestrator:
    """
    Registry of data providers plus the waterfall engine that drives them.

    The registry is built once at startup and only read afterwards, so
    concurrent requests share it freely. Statistics are informational and
    never influence provider order.
    """

    def __init__(
        self,
        credit_ledger: CreditLedger,
        default_config: Optional[WaterfallConfig] = None,
        credit_gate_amount: Optional[float] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            credit_ledger: Ledger that authorizes and records spend
            default_config: Waterfall policy used when a call passes none
            credit_gate_amount: Balance required before each paid provider call
        """
        self.credit_ledger = credit_ledger
        self.default_config = default_config or WaterfallConfig()
        self.credit_gate_amount = (
            credit_gate_amount
            if credit_gate_amount is not None
            else default_settings.CREDIT_GATE_AMOUNT
        )
        self._providers: Dict[str, Tuple[BaseDataProvider, int]] = {}
        self.provider_stats: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register_provider(self, provider: BaseDataProvider, priority: int) -> None:
        """Register (or re-register) a provider; lower priority is tried first."""
        self._providers[provider.name] = (provider, priority)
        self.provider_stats[provider.name] = _empty_stats()
        logger.info(
            f"Provider registered: {provider.name} (priority={priority}, "
            f"capabilities={sorted(c.value for c in provider.capabilities)})"
        )

    def get_providers_with_capability(
        self, capability: ProviderCapability
    ) -> List[BaseDataProvider]:
        """Providers declaring `capability`, ascending by priority."""
        candidates = [
            (priority, provider)
            for provider, priority in self._providers.values()
            if provider.supports(capability)
        ]
        candidates.sort(key=lambda item: item[0])
        return [provider for _, provider in candidates]

    def get_registered_providers(self) -> List[str]:
        """Registered provider names in priority order."""
        ordered = sorted(self._providers.values(), key=lambda item: item[1])
        return [provider.name for provider, _ in ordered]

    # ------------------------------------------------------------------
    # Waterfall strategies
    # ------------------------------------------------------------------

    async def enrich_company(
        self,
        client_id: str,
        params: CompanyEnrichParams,
        config: Optional[WaterfallConfig] = None,
    ) -> WaterfallResult[UnifiedCompany]:
        """
        Enrich a company by domain and/or name across providers.

        Args:
            client_id: Client whose credits pay for the calls
            params: Domain and/or name of the company
            config: Waterfall policy (defaults to the orchestrator's)

        Returns:
            Merged company (None if no provider produced data), the providers
            that contributed, and the total credits charged
        """
        return await self._run_waterfall(
            client_id,
            ProviderCapability.COMPANY_ENRICH,
            params,
            config,
            f"Company enrichment: {params.domain or params.name}",
        )

    async def enrich_person(
        self,
        client_id: str,
        params: PeopleEnrichParams,
        config: Optional[WaterfallConfig] = None,
    ) -> WaterfallResult[UnifiedContact]:
        """Enrich a contact across providers, same policy as enrich_company."""
        target = params.email or params.linkedin_url or " ".join(
            part for part in (params.first_name, params.last_name) if part
        )
        return await self._run_waterfall(
            client_id,
            ProviderCapability.PEOPLE_ENRICH,
            params,
            config,
            f"Person enrichment: {target}",
        )

    async def _run_waterfall(
        self,
        client_id: str,
        capability: ProviderCapability,
        params: Any,
        config: Optional[WaterfallConfig],
        description: str,
    ) -> WaterfallResult:
        cfg = config or self.default_config
        merged = None
        providers_used: List[str] = []
        total_cost = 0.0

        for provider in self.get_providers_with_capability(capability):
            if len(providers_used) >= cfg.max_providers:
                break

            method = provider.get_capability_method(capability)
            if method is None:
                continue

            # Ledger errors propagate: they are fatal for the whole call
            if not await self.credit_ledger.has_balance(client_id, self.credit_gate_amount):
                logger.warning(
                    f"Insufficient credits for client {client_id}, skipping {provider.name}"
                )
                continue

            response = await self._call_provider(provider, capability, method, params)
            if not (response.success and response.data is not None):
                continue

            await self._charge(client_id, provider, capability, response.credits_consumed, description)
            total_cost += response.credits_consumed
            providers_used.append(provider.name)
            merged = response.data if merged is None else merge_records(merged, response.data)

            if response.quality_score >= cfg.quality_threshold and has_required_fields(
                merged, cfg.required_fields
            ):
                logger.debug(
                    f"{capability.value} stopped early after {provider.name} "
                    f"(quality={response.quality_score:.2f})"
                )
                break

        logger.info(
            f"{capability.value} waterfall complete for client {client_id}: "
            f"providers={providers_used}, total_cost={total_cost}"
        )
        return WaterfallResult(result=merged, providers_used=providers_used, total_cost=total_cost)

    # ------------------------------------------------------------------
    # Single-result strategies
    # ------------------------------------------------------------------

    async def search_companies(
        self, client_id: str, params: CompanySearchParams
    ) -> WaterfallResult[List[UnifiedCompany]]:
        keywords = ", ".join(params.keywords or params.industries or []) or "bulk"
        return await self._run_single(
            client_id,
            ProviderCapability.COMPANY_SEARCH,
            params,
            f"Company search: {keywords}",
            empty_result=[],
        )

    async def search_people(
        self, client_id: str, params: PeopleSearchParams
    ) -> WaterfallResult[List[UnifiedContact]]:
        domains = ", ".join(params.company_domains or []) or "bulk"
        return await self._run_single(
            client_id,
            ProviderCapability.PEOPLE_SEARCH,
            params,
            f"People search: {domains}",
            empty_result=[],
        )

    async def find_email(
        self, client_id: str, params: EmailFindParams
    ) -> WaterfallResult[EmailFindResult]:
        return await self._run_single(
            client_id,
            ProviderCapability.EMAIL_FIND,
            params,
            f"Email find: {params.first_name} {params.last_name} @ {params.company_domain}",
            gate_on_balance=True,
        )

    async def verify_email(
        self, client_id: str, params: EmailVerifyParams
    ) -> WaterfallResult[EmailVerificationResult]:
        return await self._run_single(
            client_id,
            ProviderCapability.EMAIL_VERIFY,
            params,
            f"Email verify: {params.email}",
        )

    async def _run_single(
        self,
        client_id: str,
        capability: ProviderCapability,
        params: Any,
        description: str,
        gate_on_balance: bool = False,
        empty_result: Any = None,
    ) -> WaterfallResult:
        """First provider returning non-empty data wins; nothing is merged."""
        for provider in self.get_providers_with_capability(capability):
            method = provider.get_capability_method(capability)
            if method is None:
                continue

            if gate_on_balance and not await self.credit_ledger.has_balance(
                client_id, self.credit_gate_amount
            ):
                logger.warning(
                    f"Insufficient credits for client {client_id}, skipping {provider.name}"
                )
                continue

            response = await self._call_provider(provider, capability, method, params)
            if not (response.success and _has_data(response.data)):
                continue

            if response.credits_consumed > 0:
                await self._charge(
                    client_id, provider, capability, response.credits_consumed, description
                )
            logger.info(f"{capability.value} answered by {provider.name} for client {client_id}")
            return WaterfallResult(
                result=response.data,
                providers_used=[provider.name],
                total_cost=response.credits_consumed,
            )

        return WaterfallResult(result=empty_result, providers_used=[], total_cost=0.0)

    # ------------------------------------------------------------------
    # Provider calls, charging and statistics
    # ------------------------------------------------------------------

    async def _call_provider(
        self,
        provider: BaseDataProvider,
        capability: ProviderCapability,
        method: Callable,
        params: Any,
    ) -> ProviderResponse:
        """Invoke one provider method, absorbing anything it raises."""
        started = time.perf_counter()
        try:
            response = await method(params)
            outcome = "success" if response.success else "failure"
        except Exception as exc:
            logger.exception(f"Provider {provider.name} raised during {capability.value}: {exc}")
            failure_cls = (
                PaginatedResponse if capability in _PAGINATED_CAPABILITIES else ProviderResponse
            )
            response = failure_cls.failure(str(exc))
            outcome = "error"
        latency = time.perf_counter() - started

        PROVIDER_CALLS.labels(
            provider=provider.name, capability=capability.value, outcome=outcome
        ).inc()
        PROVIDER_LATENCY.labels(provider=provider.name, capability=capability.value).observe(
            latency
        )

        if outcome == "failure":
            logger.error(f"Provider {provider.name} {capability.value} failed: {response.error}")
        self._record_call(provider.name, response, outcome, latency)
        return response

    async def _charge(
        self,
        client_id: str,
        provider: BaseDataProvider,
        capability: ProviderCapability,
        amount: float,
        description: str,
    ) -> None:
        await self.credit_ledger.charge(
            client_id,
            ChargeRequest(
                base_cost=amount,
                source=provider.name,
                operation=capability.value,
                description=description,
            ),
        )
        CREDITS_CHARGED.labels(provider=provider.name, capability=capability.value).inc(amount)
        self.provider_stats.setdefault(provider.name, _empty_stats())["total_credits"] += amount

    def _record_call(
        self, name: str, response: ProviderResponse, outcome: str, latency: float
    ) -> None:
        stats = self.provider_stats.setdefault(name, _empty_stats())
        stats["calls"] += 1
        stats["latency_total"] += latency
        if outcome == "success":
            stats["success_count"] += 1
            stats["quality_total"] += response.quality_score
            stats["last_success"] = time.time()
        else:
            stats["failure_count" if outcome == "failure" else "error_count"] += 1
            stats["last_error"] = response.error

    def get_provider_status(self) -> Dict[str, Any]:
        """
        Get current statistics of all registered providers.

        Returns:
            Dictionary with one entry per provider, in priority order
        """
        providers = []
        for name in self.get_registered_providers():
            provider, priority = self._providers[name]
            stats = self.provider_stats.get(name, _empty_stats())
            calls = stats["calls"]
            successes = stats["success_count"]
            providers.append(
                {
                    "name": name,
                    "display_name": provider.display_name,
                    "priority": priority,
                    "capabilities": sorted(c.value for c in provider.capabilities),
                    "calls": calls,
                    "success_count": successes,
                    "failure_count": stats["failure_count"],
                    "error_count": stats["error_count"],
                    "total_credits": stats["total_credits"],
                    "average_quality": stats["quality_total"] / successes if successes else 0.0,
                    "average_latency": stats["latency_total"] / calls if calls else 0.0,
                    "last_error": stats["last_error"],
                    "last_success": stats["last_success"],
                }
            )
        return {"providers": providers, "total_providers": len(providers)}

    def reset_provider_health(self, provider_name: Optional[str] = None) -> None:
        """
        Reset statistics for providers.

        Args:
            provider_name: Specific provider to reset, or None for all providers
        """
        if provider_name:
            if provider_name in self._providers:
                self.provider_stats[provider_name] = _empty_stats()
                logger.info(f"Reset statistics for provider: {provider_name}")
        else:
            self.provider_stats = {name: _empty_stats() for name in self._providers}
            logger.info("Reset statistics for all providers")

    async def aclose(self) -> None:
        """Stop every provider's rate limiter ticker."""
        for provider, _ in self._providers.values():
            await provider.aclose()


# Factory function for creating orchestrator instances
def create_source_orchestrator(
    credit_ledger: CreditLedger,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> SourceOrchestrator:
    """
    Factory function to create an orchestrator with the reference providers.

    Every provider whose API key is configured is registered at its configured
    priority. A provider that fails to initialize is logged and skipped.

    Args:
        credit_ledger: Ledger that authorizes and records spend
        settings: Settings to read keys, priorities and defaults from
        http_client: Shared AsyncClient for all providers

    Returns:
        Configured SourceOrchestrator instance
    """
    cfg = settings or default_settings
    orchestrator = SourceOrchestrator(
        credit_ledger,
        default_config=WaterfallConfig(
            quality_threshold=cfg.WATERFALL_QUALITY_THRESHOLD,
            max_providers=cfg.WATERFALL_MAX_PROVIDERS,
        ),
        credit_gate_amount=cfg.CREDIT_GATE_AMOUNT,
    )

    candidates = [
        (ApolloProvider, cfg.APOLLO_API_KEY, cfg.APOLLO_PRIORITY),
        (LeadMagicProvider, cfg.LEADMAGIC_API_KEY, cfg.LEADMAGIC_PRIORITY),
        (ProspeoProvider, cfg.PROSPEO_API_KEY, cfg.PROSPEO_PRIORITY),
    ]
    for provider_cls, api_key, priority in candidates:
        if not api_key:
            logger.debug(f"{provider_cls.display_name} API key not configured, not registering")
            continue
        try:
            provider = provider_cls(
                api_key, http_client=http_client, timeout=cfg.HTTP_TIMEOUT_SECONDS
            )
            orchestrator.register_provider(provider, priority)
        except Exception as exc:
            logger.warning(f"Failed to initialize {provider_cls.display_name} provider: {exc}")

    if not orchestrator.get_registered_providers():
        logger.warning("No enrichment providers configured - every request will return no data")

    return orchestrator
