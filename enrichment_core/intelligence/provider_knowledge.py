"""
Static knowledge base of data providers and buying-signal types.

Profiles describe how saturated each provider's data is, where it is strong
and what it is best at. They drive the originality weight used by the
intelligence scorer and the context ranking used to choose provider order
dynamically. The tables are immutable and shared across all requests.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

DEFAULT_COMMONALITY = 0.5

COST_TIER_BONUS = {"low": 1.0, "medium": 0.5, "high": 0.0}


@dataclass(frozen=True)
class ProviderProfile:
    name: str
    display_name: str
    commonality_score: float  # 0-1, share of the market already using this data
    strong_industries: Tuple[str, ...]
    best_operations: Tuple[str, ...]  # ranked by effectiveness
    detectable_signals: Tuple[str, ...]
    cost_tier: str  # low, medium, high
    data_freshness_days: int
    unique_strengths: Tuple[str, ...] = ()

    @property
    def originality_weight(self) -> float:
        return 1 - self.commonality_score


@dataclass(frozen=True)
class SignalDefinition:
    signal_type: str
    display_name: str
    default_weight: float
    decay_days: int
    description: str


def _profiles(*profiles: ProviderProfile) -> Mapping[str, ProviderProfile]:
    return MappingProxyType({profile.name: profile for profile in profiles})


PROVIDER_PROFILES: Mapping[str, ProviderProfile] = _profiles(
    ProviderProfile(
        name="apollo",
        display_name="Apollo.io",
        commonality_score=0.95,
        strong_industries=("technology", "saas", "software", "fintech", "healthcare"),
        best_operations=("people_search", "company_search", "people_enrich", "company_enrich"),
        detectable_signals=("hiring_surge", "recent_funding", "tech_adoption"),
        cost_tier="low",
        data_freshness_days=30,
        unique_strengths=("Large contact database", "Good email coverage", "Intent signals"),
    ),
    ProviderProfile(
        name="leadmagic",
        display_name="LeadMagic",
        commonality_score=0.4,
        strong_industries=("technology", "ecommerce", "marketing"),
        best_operations=("email_find", "company_enrich", "people_enrich"),
        detectable_signals=("tech_adoption",),
        cost_tier="low",
        data_freshness_days=14,
        unique_strengths=("Real-time email verification", "Technographic data", "IP-based enrichment"),
    ),
    ProviderProfile(
        name="prospeo",
        display_name="Prospeo",
        commonality_score=0.3,
        strong_industries=("technology", "consulting", "professional_services"),
        best_operations=("email_find", "email_verify", "people_search"),
        detectable_signals=(),
        cost_tier="low",
        data_freshness_days=7,
        unique_strengths=("High email accuracy", "LinkedIn scraping", "Real-time verification"),
    ),
    ProviderProfile(
        name="exa",
        display_name="Exa.ai",
        commonality_score=0.1,
        strong_industries=("technology", "ai_ml", "biotech", "cleantech", "deep_tech"),
        best_operations=("company_search", "company_enrich"),
        detectable_signals=("expansion", "new_product_launch", "recent_funding", "leadership_change"),
        cost_tier="medium",
        data_freshness_days=1,
        unique_strengths=("Semantic search understands intent", "Finds emerging companies", "Real-time web data"),
    ),
    ProviderProfile(
        name="tavily",
        display_name="Tavily",
        commonality_score=0.1,
        strong_industries=("technology", "media", "finance", "healthcare"),
        best_operations=("company_search", "company_enrich"),
        detectable_signals=("recent_funding", "expansion", "new_product_launch", "leadership_change"),
        cost_tier="medium",
        data_freshness_days=1,
        unique_strengths=("AI-optimized search results", "Real-time news and events", "Good for recent signals"),
    ),
    ProviderProfile(
        name="apify",
        display_name="Apify",
        commonality_score=0.2,
        strong_industries=("technology", "ecommerce", "retail", "media"),
        best_operations=("company_enrich", "people_enrich"),
        detectable_signals=("hiring_surge", "tech_adoption", "expansion"),
        cost_tier="low",
        data_freshness_days=1,
        unique_strengths=("LinkedIn data scraping", "Custom actor flexibility", "Real-time scraping"),
    ),
    ProviderProfile(
        name="parallel",
        display_name="Parallel.ai",
        commonality_score=0.15,
        strong_industries=("technology", "finance", "consulting"),
        best_operations=("company_enrich", "people_enrich"),
        detectable_signals=("tech_adoption", "hiring_surge"),
        cost_tier="medium",
        data_freshness_days=7,
        unique_strengths=("AI-powered deep enrichment", "Multi-source aggregation", "Structured output"),
    ),
    ProviderProfile(
        name="valyu",
        display_name="Valyu",
        commonality_score=0.05,
        strong_industries=("technology", "ai_ml", "research", "academia"),
        best_operations=("company_search", "company_enrich"),
        detectable_signals=("new_product_launch", "expansion"),
        cost_tier="low",
        data_freshness_days=3,
        unique_strengths=("Proprietary + web data blend", "Very low cost", "Good for niche/emerging companies"),
    ),
    ProviderProfile(
        name="diffbot",
        display_name="Diffbot",
        commonality_score=0.15,
        strong_industries=("technology", "enterprise", "manufacturing", "finance"),
        best_operations=("company_enrich", "people_enrich", "company_search", "email_find"),
        detectable_signals=(
            "leadership_change",
            "hiring_surge",
            "recent_funding",
            "tech_adoption",
            "expansion",
        ),
        cost_tier="high",
        data_freshness_days=7,
        unique_strengths=(
            "Knowledge Graph with entity relationships",
            "Structured web-wide data",
            "Comprehensive org charts",
        ),
    ),
    ProviderProfile(
        name="browserbase",
        display_name="Browserbase",
        commonality_score=0.02,
        strong_industries=("technology", "ecommerce", "retail"),
        best_operations=("company_enrich",),
        detectable_signals=("tech_adoption", "new_product_launch"),
        cost_tier="medium",
        data_freshness_days=0,
        unique_strengths=("Real-time website scraping", "Handles JS-rendered content", "Bypasses bot protection"),
    ),
    ProviderProfile(
        name="agentql",
        display_name="AgentQL",
        commonality_score=0.02,
        strong_industries=("technology", "saas"),
        best_operations=("company_enrich",),
        detectable_signals=("tech_adoption",),
        cost_tier="low",
        data_freshness_days=0,
        unique_strengths=("AI-powered semantic extraction", "Structured data from any page", "Low cost"),
    ),
    ProviderProfile(
        name="firecrawl",
        display_name="Firecrawl",
        commonality_score=0.05,
        strong_industries=("technology", "saas", "ecommerce"),
        best_operations=("company_search", "company_enrich"),
        detectable_signals=("tech_adoption", "new_product_launch"),
        cost_tier="medium",
        data_freshness_days=0,
        unique_strengths=("Schema-driven extraction", "Multi-URL crawling", "Clean markdown output"),
    ),
    ProviderProfile(
        name="scrapegraph",
        display_name="ScrapeGraphAI",
        commonality_score=0.02,
        strong_industries=("technology", "saas"),
        best_operations=("company_search", "company_enrich"),
        detectable_signals=("tech_adoption",),
        cost_tier="medium",
        data_freshness_days=0,
        unique_strengths=("AI-driven extraction", "Natural language queries", "Search + scrape combo"),
    ),
)


SIGNAL_DEFINITIONS: Mapping[str, SignalDefinition] = MappingProxyType(
    {
        definition.signal_type: definition
        for definition in (
            SignalDefinition(
                "recent_funding",
                "Recent Funding",
                0.9,
                180,
                "Company received funding in the last 6 months",
            ),
            SignalDefinition(
                "hiring_surge",
                "Hiring Surge",
                0.8,
                90,
                "Significant increase in job postings or headcount",
            ),
            SignalDefinition(
                "leadership_change",
                "Leadership Change",
                0.85,
                120,
                "New C-suite or VP-level hire detected",
            ),
            SignalDefinition(
                "tech_adoption",
                "Technology Adoption",
                0.7,
                90,
                "Company adopted new technology relevant to client offering",
            ),
            SignalDefinition(
                "expansion",
                "Geographic Expansion",
                0.75,
                120,
                "Company expanding to new markets or opening new offices",
            ),
            SignalDefinition(
                "new_product_launch",
                "New Product/Service",
                0.65,
                90,
                "Company launched a new product or service line",
            ),
            SignalDefinition(
                "pain_point_detected",
                "Pain Point Detected",
                0.95,
                60,
                "AI detected a pain point matching client solution",
            ),
            SignalDefinition(
                "competitive_displacement",
                "Competitive Displacement",
                0.9,
                90,
                "Company may be looking to switch from a competitor",
            ),
        )
    }
)


def get_provider_profile(name: str) -> Optional[ProviderProfile]:
    return PROVIDER_PROFILES.get(name)


def get_signal_definition(signal_type: str) -> Optional[SignalDefinition]:
    return SIGNAL_DEFINITIONS.get(signal_type)


def get_provider_originality_weight(name: str) -> float:
    """1 = very unique data, 0 = very common. Unknown providers score 0.5."""
    profile = PROVIDER_PROFILES.get(name)
    if profile is None:
        return 1 - DEFAULT_COMMONALITY
    return profile.originality_weight


def score_provider_for_context(name: str, industry: str, operation: str) -> float:
    """Fitness of one provider for an industry + operation pair (0 without a profile)."""
    profile = PROVIDER_PROFILES.get(name)
    if profile is None:
        return 0.0

    industry = (industry or "").lower()
    score = 0.0
    if any(strong.lower() in industry for strong in profile.strong_industries):
        score += 3
    if operation in profile.best_operations:
        score += 2 - 0.3 * profile.best_operations.index(operation)
    score += (1 - profile.commonality_score) * 1.5
    score += COST_TIER_BONUS.get(profile.cost_tier, 0.0)
    return score


def rank_providers_for_context(
    industry: str, operation: str, available_providers: Iterable[str]
) -> List[str]:
    """
    Rank provider names by fitness for an industry + operation, best first.

    Ties keep their input order. Providers without a profile score 0 and
    therefore sort after every profiled provider.
    """
    names = list(available_providers)
    scored = [
        (name in PROVIDER_PROFILES, score_provider_for_context(name, industry, operation), name)
        for name in names
    ]
    scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [name for _, _, name in scored]
