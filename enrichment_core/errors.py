"""
Typed exceptions for provider adapters and the credit ledger.

Provider errors never escape an adapter: every adapter converts them into a
failed ProviderResponse. Ledger errors are the opposite: they propagate out
of the orchestrator unchanged and are fatal to the enrichment call.
"""

from typing import Optional


# ============================================================================
# Provider Exceptions
# ============================================================================


class EnrichmentProviderError(Exception):
    """Base exception for all enrichment provider errors."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.provider = provider
        self.error_code = error_code
        super().__init__(self.message)


class RateLimitError(EnrichmentProviderError):
    """Exception raised when a provider's own API rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        self.retry_after = retry_after
        super().__init__(message, provider, "RATE_LIMIT")


class AuthenticationError(EnrichmentProviderError):
    """Exception raised when API authentication fails or no key is configured."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message, provider, "AUTHENTICATION")


class ConfigurationError(EnrichmentProviderError):
    """Exception raised when provider configuration is invalid."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message, provider, "CONFIGURATION")


class ServiceUnavailableError(EnrichmentProviderError):
    """Exception raised when the provider service is unavailable."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message, provider, "SERVICE_UNAVAILABLE")


# ============================================================================
# Ledger Exceptions
# ============================================================================


class LedgerError(Exception):
    """Base exception for credit ledger failures."""


class ClientNotFoundError(LedgerError):
    """Raised when the ledger has no account for a client."""

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client '{client_id}' not found")


class InsufficientCreditsError(LedgerError):
    """Raised when a charge would take a client's balance below zero."""

    def __init__(self, client_id: str, required: float, available: float):
        self.client_id = client_id
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient credits for client '{client_id}'. "
            f"Required: {required}, Available: {available}"
        )
