"""
Provider knowledge base, timeliness model and intelligence scoring.
"""

from .icp_scorer import IcpFilters, IcpFitResult, score_company_fit
from .intelligence_scorer import (
    DetectedSignal,
    IntelligenceScorer,
    IntelligenceScoreResult,
    ScoringWeights,
    SourceRecord,
    source_records_from_providers,
)
from .provider_knowledge import (
    PROVIDER_PROFILES,
    SIGNAL_DEFINITIONS,
    ProviderProfile,
    SignalDefinition,
    get_provider_originality_weight,
    get_provider_profile,
    get_signal_definition,
    rank_providers_for_context,
)
from .timeliness import (
    TIMELINESS_BANDS,
    UNKNOWN_DATE_MULTIPLIER,
    TimelinessResult,
    apply_timeliness,
    compute_timeliness_multiplier,
)

__all__ = [
    "PROVIDER_PROFILES",
    "SIGNAL_DEFINITIONS",
    "TIMELINESS_BANDS",
    "UNKNOWN_DATE_MULTIPLIER",
    "DetectedSignal",
    "IcpFilters",
    "IcpFitResult",
    "IntelligenceScoreResult",
    "IntelligenceScorer",
    "ProviderProfile",
    "ScoringWeights",
    "SignalDefinition",
    "SourceRecord",
    "TimelinessResult",
    "apply_timeliness",
    "compute_timeliness_multiplier",
    "get_provider_originality_weight",
    "get_provider_profile",
    "get_signal_definition",
    "rank_providers_for_context",
    "score_company_fit",
    "source_records_from_providers",
]
