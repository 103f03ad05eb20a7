"""
Intelligence scorer: composite ranking score for enriched companies.

Four sub-scores, each in [0, 1], are combined as a literal weighted sum
(weights are not normalized):

- ICP fit, delegated to an ICP matcher
- buying signals, priority-weighted and decayed by event age
- originality of the providers the data came from
- cost efficiency of the spend that produced the record
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..config import settings
from ..enrich_providers.base import UnifiedCompany
from .icp_scorer import IcpFilters, IcpFitResult, score_company_fit
from .provider_knowledge import SIGNAL_DEFINITIONS, get_provider_originality_weight
from .timeliness import EventDate, apply_timeliness, round_half_up

logger = logging.getLogger(__name__)

UNKNOWN_SIGNAL_PRIORITY = 0.5
NEUTRAL_ORIGINALITY = 0.5
NEUTRAL_COST_EFFICIENCY = 0.5
HIGH_ORIGINALITY = 0.7
LOW_ORIGINALITY = 0.3

IcpMatcher = Callable[[UnifiedCompany, IcpFilters], IcpFitResult]


@dataclass
class DetectedSignal:
    """A buying signal detected for a company."""

    signal_type: str
    signal_strength: float
    evidence: str = ""
    source: str = ""
    event_date: EventDate = None
    details: Dict[str, Any] = field(default_factory=dict)

    def resolve_event_date(self) -> EventDate:
        if self.event_date:
            return self.event_date
        details = self.details or {}
        return details.get("event_date") or details.get("eventDate")


@dataclass
class SourceRecord:
    """Provenance of one provider's contribution to a record."""

    source: str
    fetched_at: str
    fields_provided: List[str] = field(default_factory=list)
    quality_score: Optional[float] = None


def source_records_from_providers(
    providers_used: Iterable[str], fetched_at: Optional[str] = None
) -> List[SourceRecord]:
    """Turn a waterfall's providers_used into scorer input."""
    stamp = fetched_at or datetime.now(timezone.utc).isoformat()
    return [SourceRecord(source=name, fetched_at=stamp) for name in providers_used]


@dataclass
class ScoringWeights:
    icp_fit: float = field(default_factory=lambda: settings.SCORE_WEIGHT_ICP_FIT)
    signals: float = field(default_factory=lambda: settings.SCORE_WEIGHT_SIGNALS)
    originality: float = field(default_factory=lambda: settings.SCORE_WEIGHT_ORIGINALITY)
    cost_efficiency: float = field(default_factory=lambda: settings.SCORE_WEIGHT_COST_EFFICIENCY)


@dataclass
class IntelligenceScoreResult:
    intelligence_score: float
    icp_fit_score: float
    signal_score: float
    originality_score: float
    cost_efficiency_score: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    reasons: List[str] = field(default_factory=list)


def _resolve_weights(
    weights: Optional[Union[ScoringWeights, Mapping[str, float]]]
) -> ScoringWeights:
    if weights is None:
        return ScoringWeights()
    if isinstance(weights, ScoringWeights):
        return weights
    # Partial override of the defaults
    return dataclasses.replace(ScoringWeights(), **dict(weights))


class IntelligenceScorer:
    """
    Score companies with the composite intelligence algorithm.

    The ICP matcher is injectable; score_company_fit is used by default.
    """

    def __init__(self, icp_matcher: Optional[IcpMatcher] = None):
        self.icp_matcher = icp_matcher or score_company_fit

    def score_company(
        self,
        company: UnifiedCompany,
        icp_filters: IcpFilters,
        signals: Sequence[DetectedSignal],
        sources: Sequence[SourceRecord],
        total_cost_credits: float,
        weights: Optional[Union[ScoringWeights, Mapping[str, float]]] = None,
        signal_priorities: Optional[Mapping[str, float]] = None,
        reference_date: Optional[datetime] = None,
    ) -> IntelligenceScoreResult:
        """
        Score a company.

        Args:
            company: Enriched company
            icp_filters: ICP the company is matched against
            signals: Buying signals detected for the company
            sources: Providers that contributed to the record
            total_cost_credits: Credits spent producing the record
            weights: Component weights, or a partial mapping overriding defaults
            signal_priorities: Per-signal-type priority overrides
            reference_date: Clock for signal decay (defaults to now)

        Returns:
            IntelligenceScoreResult with the composite score, the four
            components, a breakdown and reasons
        """
        w = _resolve_weights(weights)
        reasons: List[str] = []

        icp_result = self.icp_matcher(company, icp_filters)
        icp_fit_score = icp_result.score
        reasons.extend(icp_result.reasons)

        signal_score = self.compute_signal_score(signals, signal_priorities, reference_date)
        if signals:
            reasons.append(f"{len(signals)} buying signal(s) detected")
            top_signal = max(signals, key=lambda s: s.signal_strength)
            definition = SIGNAL_DEFINITIONS.get(top_signal.signal_type)
            display_name = definition.display_name if definition else top_signal.signal_type
            reasons.append(f"Strongest: {display_name} ({top_signal.signal_strength * 100:.0f}%)")

        originality_score = self.compute_originality_score(sources)
        if originality_score > HIGH_ORIGINALITY:
            reasons.append("High originality - found via niche providers")
        elif originality_score < LOW_ORIGINALITY:
            reasons.append("Low originality - found via common providers")

        provider_count = len({source.source for source in sources})
        cost_efficiency_score = self.compute_cost_efficiency(total_cost_credits, provider_count)

        intelligence_score = round_half_up(
            icp_fit_score * w.icp_fit
            + signal_score * w.signals
            + originality_score * w.originality
            + cost_efficiency_score * w.cost_efficiency,
        )
        logger.debug(
            f"Scored {company.name}: {intelligence_score} (icp={icp_fit_score}, "
            f"signals={signal_score:.2f}, originality={originality_score:.2f}, "
            f"cost={cost_efficiency_score:.2f})"
        )

        breakdown = dict(icp_result.breakdown)
        breakdown.update(
            signal_score=signal_score,
            originality_score=originality_score,
            cost_efficiency_score=cost_efficiency_score,
        )
        return IntelligenceScoreResult(
            intelligence_score=intelligence_score,
            icp_fit_score=icp_fit_score,
            signal_score=signal_score,
            originality_score=originality_score,
            cost_efficiency_score=cost_efficiency_score,
            breakdown=breakdown,
            reasons=reasons,
        )

    @staticmethod
    def compute_signal_score(
        signals: Sequence[DetectedSignal],
        signal_priorities: Optional[Mapping[str, float]] = None,
        reference_date: Optional[datetime] = None,
    ) -> float:
        """Priority-weighted average of decayed signal strengths, capped at 1."""
        if not signals:
            return 0.0

        priorities = signal_priorities or {}
        weighted_sum = 0.0
        total_weight = 0.0
        for signal in signals:
            priority = priorities.get(signal.signal_type)
            if priority is None:
                definition = SIGNAL_DEFINITIONS.get(signal.signal_type)
                priority = definition.default_weight if definition else UNKNOWN_SIGNAL_PRIORITY

            adjusted = apply_timeliness(
                signal.signal_strength, signal.resolve_event_date(), reference_date
            )
            weighted_sum += adjusted * priority
            total_weight += priority

        if total_weight <= 0:
            return 0.0
        return min(weighted_sum / total_weight, 1.0)

    @staticmethod
    def compute_originality_score(sources: Sequence[SourceRecord]) -> float:
        """Average originality of the contributing providers (0.5 without any)."""
        if not sources:
            return NEUTRAL_ORIGINALITY
        total = sum(get_provider_originality_weight(source.source) for source in sources)
        return min(total / len(sources), 1.0)

    @staticmethod
    def compute_cost_efficiency(total_cost_credits: float, provider_count: int) -> float:
        # One credit per contributing provider is the expected spend
        expected_cost = provider_count
        if total_cost_credits <= 0:
            return 1.0
        if expected_cost <= 0:
            return NEUTRAL_COST_EFFICIENCY
        return min(expected_cost / total_cost_credits, 1.0)
