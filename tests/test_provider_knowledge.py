"""
Tests for the provider knowledge base and context ranking.
"""

import dataclasses

import pytest

from enrichment_core.intelligence.provider_knowledge import (
    PROVIDER_PROFILES,
    SIGNAL_DEFINITIONS,
    get_provider_originality_weight,
    get_provider_profile,
    get_signal_definition,
    rank_providers_for_context,
    score_provider_for_context,
)


class TestProviderProfiles:
    def test_originality_weight_is_inverse_commonality(self):
        assert get_provider_originality_weight("apollo") == pytest.approx(0.05)
        assert get_provider_originality_weight("valyu") == pytest.approx(0.95)
        assert get_provider_originality_weight("unheard_of") == pytest.approx(0.5)

    def test_lookups(self):
        assert get_provider_profile("exa").display_name == "Exa.ai"
        assert get_provider_profile("unheard_of") is None
        assert get_signal_definition("recent_funding").default_weight == pytest.approx(0.9)
        assert get_signal_definition("hiring_surge").decay_days == 90
        assert get_signal_definition("unheard_of") is None

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            PROVIDER_PROFILES["fake"] = PROVIDER_PROFILES["apollo"]
        with pytest.raises(TypeError):
            SIGNAL_DEFINITIONS["fake"] = SIGNAL_DEFINITIONS["expansion"]
        with pytest.raises(dataclasses.FrozenInstanceError):
            PROVIDER_PROFILES["apollo"].commonality_score = 0.0

    def test_profile_values_are_in_range(self):
        for profile in PROVIDER_PROFILES.values():
            assert 0.0 <= profile.commonality_score <= 1.0
            assert profile.cost_tier in ("low", "medium", "high")
        for definition in SIGNAL_DEFINITIONS.values():
            assert 0.0 <= definition.default_weight <= 1.0


class TestRankProvidersForContext:
    def test_score_components(self):
        # industry 3 + operation at rank 3 (2 - 0.9) + originality 0.05 * 1.5 + low cost 1
        assert score_provider_for_context("apollo", "Technology", "company_enrich") == pytest.approx(5.175)
        # no industry match, operation absent, originality 0.85 * 1.5, high cost 0
        assert score_provider_for_context("diffbot", "retail", "email_verify") == pytest.approx(1.275)
        assert score_provider_for_context("unheard_of", "technology", "company_enrich") == 0.0

    def test_ranking_order(self):
        ranked = rank_providers_for_context(
            "Technology SaaS", "company_enrich", ["apollo", "unheard_of", "exa", "agentql"]
        )

        assert ranked == ["agentql", "exa", "apollo", "unheard_of"]

    def test_industry_match_is_case_insensitive_substring(self):
        with_match = score_provider_for_context("prospeo", "IT Consulting", "email_find")
        without_match = score_provider_for_context("prospeo", "Agriculture", "email_find")

        assert with_match - without_match == pytest.approx(3)

    def test_unknown_providers_sort_last_in_input_order(self):
        ranked = rank_providers_for_context("retail", "email_verify", ["zeta", "alpha", "diffbot"])

        assert ranked == ["diffbot", "zeta", "alpha"]
