"""
Base classes and interfaces for enrichment providers.

This module defines the unified records every provider normalizes into, the
response envelope every adapter call returns, and the capability-based
interface that all providers implement.

An adapter declares the capabilities it supports and implements the matching
methods from CAPABILITY_METHODS. Methods never raise: every failure (network,
auth, no match, malformed payload) comes back as ProviderResponse.failure().
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Generic, List, Optional, TypeVar, Union

import httpx

from ..errors import AuthenticationError, ConfigurationError
from ..http_client import http_request
from ..rate_limiter import RateLimiter

T = TypeVar("T")


class ProviderCapability(str, Enum):
    """One operation an adapter may support."""

    COMPANY_SEARCH = "company_search"
    COMPANY_ENRICH = "company_enrich"
    PEOPLE_SEARCH = "people_search"
    PEOPLE_ENRICH = "people_enrich"
    EMAIL_FIND = "email_find"
    EMAIL_VERIFY = "email_verify"


CAPABILITY_METHODS: Dict[ProviderCapability, str] = {
    ProviderCapability.COMPANY_SEARCH: "search_companies",
    ProviderCapability.COMPANY_ENRICH: "enrich_company",
    ProviderCapability.PEOPLE_SEARCH: "search_people",
    ProviderCapability.PEOPLE_ENRICH: "enrich_person",
    ProviderCapability.EMAIL_FIND: "find_email",
    ProviderCapability.EMAIL_VERIFY: "verify_email",
}


# ============================================================================
# Unified records
# ============================================================================


@dataclass
class UnifiedCompany:
    """Normalized company record. Only the display name is required."""

    name: str
    domain: Optional[str] = None
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    industry: Optional[str] = None
    sub_industry: Optional[str] = None
    employee_count: Optional[int] = None
    employee_range: Optional[str] = None
    annual_revenue: Optional[float] = None
    revenue_range: Optional[str] = None
    founded_year: Optional[int] = None
    total_funding: Optional[float] = None
    latest_funding_stage: Optional[str] = None
    latest_funding_date: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    tech_stack: Optional[List[str]] = None
    logo_url: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    external_ids: Dict[str, str] = field(default_factory=dict)


@dataclass
class EmploymentRecord:
    company: str
    title: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_current: bool = False


@dataclass
class UnifiedContact:
    """Normalized contact record."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    linkedin_url: Optional[str] = None
    photo_url: Optional[str] = None
    title: Optional[str] = None
    seniority: Optional[str] = None
    department: Optional[str] = None
    company_name: Optional[str] = None
    company_domain: Optional[str] = None
    work_email: Optional[str] = None
    personal_email: Optional[str] = None
    phone: Optional[str] = None
    mobile_phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    employment_history: Optional[List[EmploymentRecord]] = None
    external_ids: Dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass
class EmailFindResult:
    email: str
    confidence: float


@dataclass
class EmailVerificationResult:
    email: str
    status: str  # valid, invalid, catch_all, unknown
    provider: str
    verified_at: str
    confidence: Optional[float] = None


# ============================================================================
# Request parameters
# ============================================================================


@dataclass
class CompanySearchParams:
    industries: Optional[List[str]] = None
    employee_count_min: Optional[int] = None
    employee_count_max: Optional[int] = None
    countries: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class CompanyEnrichParams:
    domain: Optional[str] = None
    name: Optional[str] = None


@dataclass
class PeopleSearchParams:
    title_patterns: Optional[List[str]] = None
    seniority_levels: Optional[List[str]] = None
    departments: Optional[List[str]] = None
    company_domains: Optional[List[str]] = None
    company_names: Optional[List[str]] = None
    countries: Optional[List[str]] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class PeopleEnrichParams:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    linkedin_url: Optional[str] = None
    company_domain: Optional[str] = None


@dataclass
class EmailFindParams:
    first_name: str
    last_name: str
    company_domain: str


@dataclass
class EmailVerifyParams:
    email: str


# ============================================================================
# Response envelopes
# ============================================================================


@dataclass
class ProviderResponse(Generic[T]):
    """Uniform envelope returned by every adapter call."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    credits_consumed: float = 0.0
    fields_populated: List[str] = field(default_factory=list)
    quality_score: float = 0.0

    @classmethod
    def failure(cls, error: str, credits_consumed: float = 0.0) -> "ProviderResponse":
        return cls(success=False, data=None, error=error, credits_consumed=credits_consumed)


@dataclass
class PaginatedResponse(ProviderResponse[List[T]]):
    total_results: int = 0
    has_more: bool = False
    next_page_token: Optional[Union[str, int]] = None

    @classmethod
    def failure(cls, error: str, credits_consumed: float = 0.0) -> "PaginatedResponse":
        return cls(success=False, data=[], error=error, credits_consumed=credits_consumed)


def get_populated_fields(record: Any) -> List[str]:
    """Names of fields holding a value (None, "" and [] count as empty)."""
    populated = []
    for f in fields(record):
        if f.name == "external_ids":
            continue
        value = getattr(record, f.name)
        if value is None or value == "":
            continue
        if isinstance(value, list) and not value:
            continue
        populated.append(f.name)
    return populated


# ============================================================================
# Defensive payload coercion
# ============================================================================


def as_str(value: Any) -> Optional[str]:
    """Non-empty string or None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def as_str_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    items = [s for s in (as_str(v) for v in value) if s]
    return items or None


def as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


# ============================================================================
# Base Provider Interface
# ============================================================================


class BaseDataProvider(ABC):
    """
    Abstract base class for all data providers.

    Subclasses set `name`, `display_name` and `capabilities`, implement
    get_auth_headers(), and implement the capability methods they declare.
    Every outbound call goes through request(), which waits on the
    provider's own rate limiter first.
    """

    name: str = ""
    display_name: str = ""
    capabilities: FrozenSet[ProviderCapability] = frozenset()
    base_url: str = ""
    rate_limit_per_second: Optional[int] = None
    rate_limit_per_minute: Optional[int] = None

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        if not api_key:
            raise AuthenticationError(
                f"{self.display_name or self.name} API key not provided", self.name
            )
        self.api_key = api_key
        self.base_url = (base_url or self.base_url).rstrip("/")
        if not self.base_url:
            raise ConfigurationError(
                f"{self.display_name or self.name} base URL not configured", self.name
            )
        self.timeout = timeout
        self.http_client = http_client
        self.rate_limiter = rate_limiter or RateLimiter(
            per_second=self.rate_limit_per_second,
            per_minute=self.rate_limit_per_minute,
            name=self.name,
        )
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @abstractmethod
    def get_auth_headers(self) -> Dict[str, str]:
        """Headers authenticating requests against the provider API."""

    def supports(self, capability: ProviderCapability) -> bool:
        return capability in self.capabilities

    def get_capability_method(self, capability: ProviderCapability) -> Optional[Callable]:
        """The bound method implementing `capability`, or None if absent."""
        method = getattr(self, CAPABILITY_METHODS[capability], None)
        return method if callable(method) else None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Rate-limited request against the provider's base URL."""
        await self.rate_limiter.acquire()
        return await http_request(
            method,
            f"{self.base_url}{path}",
            headers=self.get_auth_headers(),
            json_body=json_body,
            params=params,
            timeout=timeout if timeout is not None else self.timeout,
            client=self.http_client,
            provider=self.name,
        )

    async def aclose(self) -> None:
        await self.rate_limiter.close()

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "capabilities": sorted(c.value for c in self.capabilities),
            "rate_limit_per_second": self.rate_limit_per_second,
            "rate_limit_per_minute": self.rate_limit_per_minute,
        }

    def __str__(self) -> str:
        return self.display_name or self.name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
