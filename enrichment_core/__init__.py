"""
Multi-source enrichment orchestration and scoring engine.

Providers are queried in priority order through a credit-gated waterfall,
their partial records are merged, and the enriched entities are ranked by
a composite intelligence score.
"""

__version__ = "0.3.0"

from .credit_ledger import (
    ChargeReceipt,
    ChargeRequest,
    CreditLedger,
    InMemoryCreditLedger,
    InsufficientCreditsError,
    LedgerError,
)
from .rate_limiter import RateLimiter
from .source_orchestrator import (
    SourceOrchestrator,
    WaterfallConfig,
    WaterfallResult,
    create_source_orchestrator,
    merge_records,
)

__all__ = [
    "ChargeReceipt",
    "ChargeRequest",
    "CreditLedger",
    "InMemoryCreditLedger",
    "InsufficientCreditsError",
    "LedgerError",
    "RateLimiter",
    "SourceOrchestrator",
    "WaterfallConfig",
    "WaterfallResult",
    "create_source_orchestrator",
    "merge_records",
]
