"""
Enrichment providers package.

Every provider wraps one external data source behind the capability contract
defined in base.py and normalizes its payloads into UnifiedCompany /
UnifiedContact records.
"""

from ..errors import (
    AuthenticationError,
    ConfigurationError,
    EnrichmentProviderError,
    RateLimitError,
    ServiceUnavailableError,
)
from .apollo import ApolloProvider
from .base import (
    CAPABILITY_METHODS,
    BaseDataProvider,
    CompanyEnrichParams,
    CompanySearchParams,
    EmailFindParams,
    EmailFindResult,
    EmailVerificationResult,
    EmailVerifyParams,
    EmploymentRecord,
    PaginatedResponse,
    PeopleEnrichParams,
    PeopleSearchParams,
    ProviderCapability,
    ProviderResponse,
    UnifiedCompany,
    UnifiedContact,
    get_populated_fields,
)
from .leadmagic import LeadMagicProvider
from .prospeo import ProspeoProvider

__all__ = [
    "CAPABILITY_METHODS",
    "ApolloProvider",
    "AuthenticationError",
    "BaseDataProvider",
    "CompanyEnrichParams",
    "CompanySearchParams",
    "ConfigurationError",
    "EmailFindParams",
    "EmailFindResult",
    "EmailVerificationResult",
    "EmailVerifyParams",
    "EmploymentRecord",
    "EnrichmentProviderError",
    "LeadMagicProvider",
    "PaginatedResponse",
    "PeopleEnrichParams",
    "PeopleSearchParams",
    "ProspeoProvider",
    "ProviderCapability",
    "ProviderResponse",
    "RateLimitError",
    "ServiceUnavailableError",
    "UnifiedCompany",
    "UnifiedContact",
    "get_populated_fields",
]
