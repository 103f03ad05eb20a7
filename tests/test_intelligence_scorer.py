"""
Tests for the composite intelligence scorer and the default ICP matcher.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from enrichment_core.enrich_providers import UnifiedCompany
from enrichment_core.intelligence import (
    DetectedSignal,
    IcpFilters,
    IcpFitResult,
    IntelligenceScorer,
    ScoringWeights,
    SourceRecord,
    score_company_fit,
    source_records_from_providers,
)

REFERENCE = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _sources(*names):
    return [SourceRecord(source=name, fetched_at="2026-06-01T00:00:00+00:00") for name in names]


@pytest.fixture
def company():
    return UnifiedCompany(
        name="Acme",
        domain="acme.com",
        industry="Enterprise Software",
        employee_count=250,
        country="us",
        annual_revenue=50_000_000,
        tech_stack=["Python", "PostgreSQL", "AWS Lambda"],
        latest_funding_stage="Series B",
        founded_year=2015,
    )


@pytest.fixture
def fixed_icp():
    return MagicMock(return_value=IcpFitResult(score=0.6, breakdown={"industry": 1.0}, reasons=[]))


class TestIntelligenceScorer:
    def test_no_signals_no_sources(self, company, fixed_icp):
        scorer = IntelligenceScorer(icp_matcher=fixed_icp)

        result = scorer.score_company(company, IcpFilters(), [], [], 0)

        assert result.icp_fit_score == pytest.approx(0.6)
        assert result.signal_score == 0
        assert result.originality_score == pytest.approx(0.5)
        assert result.cost_efficiency_score == 1
        assert result.intelligence_score == pytest.approx(0.46)
        assert result.breakdown == {
            "industry": 1.0,
            "signal_score": 0.0,
            "originality_score": 0.5,
            "cost_efficiency_score": 1.0,
        }

    def test_signal_score_is_priority_weighted_and_decayed(self, company, fixed_icp):
        signals = [
            DetectedSignal("recent_funding", 0.8, event_date=REFERENCE - timedelta(days=10)),
            DetectedSignal(
                "hiring_surge",
                0.6,
                details={"eventDate": (REFERENCE - timedelta(days=60)).isoformat()},
            ),
        ]
        scorer = IntelligenceScorer(icp_matcher=fixed_icp)

        result = scorer.score_company(
            company, IcpFilters(), signals, [], 0, reference_date=REFERENCE
        )

        # (0.8 * 0.9 + 0.51 * 0.8) / (0.9 + 0.8)
        assert result.signal_score == pytest.approx(1.128 / 1.7)
        assert "2 buying signal(s) detected" in result.reasons
        assert "Strongest: Recent Funding (80%)" in result.reasons
        assert [s.signal_type for s in signals] == ["recent_funding", "hiring_surge"]

    def test_signal_priority_overrides_and_unknown_types(self):
        signals = [
            DetectedSignal("recent_funding", 0.8, event_date=REFERENCE),
            DetectedSignal("mystery", 0.4, event_date=REFERENCE),
        ]

        overridden = IntelligenceScorer.compute_signal_score(
            signals, {"recent_funding": 0.0}, REFERENCE
        )
        defaulted = IntelligenceScorer.compute_signal_score(signals, None, REFERENCE)

        assert overridden == pytest.approx(0.4)
        # mystery falls back to priority 0.5
        assert defaulted == pytest.approx((0.8 * 0.9 + 0.4 * 0.5) / 1.4)

    def test_undated_signal_gets_unknown_multiplier(self):
        score = IntelligenceScorer.compute_signal_score([DetectedSignal("expansion", 1.0)])

        assert score == pytest.approx(0.4)

    def test_originality(self, company, fixed_icp):
        scorer = IntelligenceScorer(icp_matcher=fixed_icp)

        common = scorer.score_company(company, IcpFilters(), [], _sources("apollo"), 1)
        niche = scorer.score_company(company, IcpFilters(), [], _sources("exa", "valyu"), 2)
        unknown = IntelligenceScorer.compute_originality_score(_sources("somewhere"))

        assert common.originality_score == pytest.approx(0.05)
        assert any(reason.startswith("Low originality") for reason in common.reasons)
        assert niche.originality_score == pytest.approx(0.925)
        assert any(reason.startswith("High originality") for reason in niche.reasons)
        assert unknown == pytest.approx(0.5)

    @pytest.mark.parametrize(
        "cost, providers, expected",
        [
            (0, 0, 1.0),
            (0, 3, 1.0),
            (2, 0, 0.5),
            (4, 2, 0.5),
            (1, 2, 1.0),
            (3, 3, 1.0),
        ],
    )
    def test_cost_efficiency(self, cost, providers, expected):
        assert IntelligenceScorer.compute_cost_efficiency(cost, providers) == pytest.approx(expected)

    def test_cost_efficiency_counts_distinct_providers(self, company, fixed_icp):
        scorer = IntelligenceScorer(icp_matcher=fixed_icp)

        result = scorer.score_company(company, IcpFilters(), [], _sources("apollo", "apollo"), 2)

        assert result.cost_efficiency_score == pytest.approx(0.5)

    def test_custom_weights_are_not_normalized(self, company, fixed_icp):
        scorer = IntelligenceScorer(icp_matcher=fixed_icp)

        full = scorer.score_company(
            company, IcpFilters(), [], [], 0, weights=ScoringWeights(1, 1, 1, 1)
        )
        partial = scorer.score_company(company, IcpFilters(), [], [], 0, weights={"icp_fit": 1.0})

        assert full.intelligence_score == pytest.approx(2.1)
        # 0.6 * 1.0 + 0.5 * 0.20 + 1 * 0.15
        assert partial.intelligence_score == pytest.approx(0.85)

    def test_composite_rounds_half_up(self, company):
        scorer = IntelligenceScorer(
            icp_matcher=MagicMock(return_value=IcpFitResult(score=0.5))
        )

        result = scorer.score_company(
            company, IcpFilters(), [], [], 0, weights=ScoringWeights(0.25, 0, 0, 0)
        )

        assert result.intelligence_score == pytest.approx(0.13)

    def test_decayed_signal_ties_round_up(self):
        signal = DetectedSignal("expansion", 0.5, event_date=REFERENCE - timedelta(days=60))

        assert IntelligenceScorer.compute_signal_score([signal], None, REFERENCE) == pytest.approx(0.43)

    def test_uses_default_icp_matcher(self, company):
        filters = IcpFilters(industries=["software"], countries=["US"])

        result = IntelligenceScorer().score_company(company, filters, [], [], 0)

        assert result.icp_fit_score == pytest.approx(1.0)
        assert "Industry match: Enterprise Software" in result.reasons
        assert result.breakdown["geography"] == 1.0

    def test_source_records_from_providers(self):
        records = source_records_from_providers(["apollo", "leadmagic"], fetched_at="2026-06-01")

        assert [r.source for r in records] == ["apollo", "leadmagic"]
        assert all(r.fetched_at == "2026-06-01" for r in records)


class TestScoreCompanyFit:
    def test_all_criteria_match(self, company):
        filters = IcpFilters(
            industries=["software"],
            employee_count_min=50,
            employee_count_max=500,
            countries=["US"],
            revenue_min=10_000_000,
            revenue_max=100_000_000,
            tech_stack=["python", "lambda"],
            funding_stages=["series b"],
            founded_after=2010,
        )

        result = score_company_fit(company, filters)

        assert result.score == 1.0
        assert result.breakdown["tech_stack"] == 1.0
        assert "Tech match: 2/2" in result.reasons

    def test_revenue_out_of_range_gets_partial_credit(self, company):
        filters = IcpFilters(
            industries=["software"],
            employee_count_min=50,
            employee_count_max=500,
            countries=["US"],
            revenue_min=1_000_000,
            revenue_max=10_000_000,
        )

        result = score_company_fit(company, filters)

        assert result.breakdown["revenue"] == pytest.approx(0.3)
        # (3 + 2 + 2 + 0.3 * 2) / 9
        assert result.score == pytest.approx(0.84)

    def test_unknown_values_score_zero(self):
        bare = UnifiedCompany(name="Bare")
        filters = IcpFilters(employee_count_min=10, revenue_max=5_000_000, founded_before=2020)

        result = score_company_fit(bare, filters)

        assert result.score == 0.0
        assert result.breakdown == {"employee_count": 0.0, "revenue": 0.0, "founded_year": 0.0}

    def test_tech_stack_is_a_match_fraction(self, company):
        result = score_company_fit(company, IcpFilters(tech_stack=["python", "ruby", "go", "rust"]))

        assert result.breakdown["tech_stack"] == pytest.approx(0.25)
        assert result.score == pytest.approx(0.25)

    def test_tech_stack_ignored_without_company_technologies(self):
        result = score_company_fit(UnifiedCompany(name="Bare"), IcpFilters(tech_stack=["python"]))

        assert result.score == 0.0
        assert "tech_stack" not in result.breakdown

    def test_no_criteria(self, company):
        assert score_company_fit(company, IcpFilters()).score == 0.0
