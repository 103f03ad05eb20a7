"""
Default ICP matcher: weighted criteria fit of a company against ICP filters.

Only criteria the filters actually specify count towards the score. A
criterion whose company value is unknown scores 0 for that criterion.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..enrich_providers.base import UnifiedCompany
from .timeliness import round_half_up

INDUSTRY_WEIGHT = 3
EMPLOYEE_COUNT_WEIGHT = 2
GEOGRAPHY_WEIGHT = 2
REVENUE_WEIGHT = 2
TECH_STACK_WEIGHT = 2
FUNDING_WEIGHT = 1
FOUNDED_YEAR_WEIGHT = 1

# Known revenue outside the range still earns partial credit
REVENUE_OUT_OF_RANGE_CREDIT = 0.3


@dataclass
class IcpFilters:
    industries: Optional[List[str]] = None
    employee_count_min: Optional[int] = None
    employee_count_max: Optional[int] = None
    revenue_min: Optional[float] = None
    revenue_max: Optional[float] = None
    funding_stages: Optional[List[str]] = None
    founded_after: Optional[int] = None
    founded_before: Optional[int] = None
    countries: Optional[List[str]] = None
    tech_stack: Optional[List[str]] = None


@dataclass
class IcpFitResult:
    score: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    reasons: List[str] = field(default_factory=list)


def _in_range(value: float, low: Optional[float], high: Optional[float]) -> bool:
    return (low is None or value >= low) and (high is None or value <= high)


def score_company_fit(company: UnifiedCompany, filters: IcpFilters) -> IcpFitResult:
    """
    Score how well a company fits an ICP.

    Args:
        company: Enriched company record
        filters: ICP criteria

    Returns:
        IcpFitResult with the weighted score in [0, 1] (rounded to 2 decimals),
        per-criterion breakdown and human-readable reasons
    """
    breakdown: Dict[str, float] = {}
    reasons: List[str] = []
    total_weight = 0.0
    total_score = 0.0

    if filters.industries:
        total_weight += INDUSTRY_WEIGHT
        industry = (company.industry or "").lower()
        match = bool(industry) and any(i.lower() in industry for i in filters.industries)
        breakdown["industry"] = 1.0 if match else 0.0
        total_score += breakdown["industry"] * INDUSTRY_WEIGHT
        if match:
            reasons.append(f"Industry match: {company.industry}")

    if filters.employee_count_min is not None or filters.employee_count_max is not None:
        total_weight += EMPLOYEE_COUNT_WEIGHT
        count = company.employee_count or 0
        in_range = count > 0 and _in_range(
            count, filters.employee_count_min, filters.employee_count_max
        )
        breakdown["employee_count"] = 1.0 if in_range else 0.0
        total_score += breakdown["employee_count"] * EMPLOYEE_COUNT_WEIGHT
        if in_range:
            reasons.append(f"Employee count {count} in range")

    if filters.countries:
        total_weight += GEOGRAPHY_WEIGHT
        country = (company.country or "").upper()
        match = bool(country) and any(c.upper() == country for c in filters.countries)
        breakdown["geography"] = 1.0 if match else 0.0
        total_score += breakdown["geography"] * GEOGRAPHY_WEIGHT
        if match:
            reasons.append(f"Country match: {company.country}")

    if filters.revenue_min is not None or filters.revenue_max is not None:
        total_weight += REVENUE_WEIGHT
        revenue = company.annual_revenue or 0
        if revenue > 0:
            in_range = _in_range(revenue, filters.revenue_min, filters.revenue_max)
            breakdown["revenue"] = 1.0 if in_range else REVENUE_OUT_OF_RANGE_CREDIT
            if in_range:
                reasons.append(f"Revenue ${revenue:,.0f} in range")
        else:
            breakdown["revenue"] = 0.0
        total_score += breakdown["revenue"] * REVENUE_WEIGHT

    # Only counts when both sides list technologies
    if filters.tech_stack and company.tech_stack:
        total_weight += TECH_STACK_WEIGHT
        company_tech = [t.lower() for t in company.tech_stack]
        match_count = sum(
            1 for wanted in filters.tech_stack if any(wanted.lower() in t for t in company_tech)
        )
        breakdown["tech_stack"] = match_count / len(filters.tech_stack)
        total_score += breakdown["tech_stack"] * TECH_STACK_WEIGHT
        if match_count:
            reasons.append(f"Tech match: {match_count}/{len(filters.tech_stack)}")

    if filters.funding_stages:
        total_weight += FUNDING_WEIGHT
        stage = (company.latest_funding_stage or "").lower()
        match = bool(stage) and any(f.lower() in stage for f in filters.funding_stages)
        breakdown["funding"] = 1.0 if match else 0.0
        total_score += breakdown["funding"] * FUNDING_WEIGHT
        if match:
            reasons.append(f"Funding stage match: {company.latest_funding_stage}")

    if filters.founded_after is not None or filters.founded_before is not None:
        total_weight += FOUNDED_YEAR_WEIGHT
        year = company.founded_year or 0
        in_range = year > 0 and _in_range(year, filters.founded_after, filters.founded_before)
        breakdown["founded_year"] = 1.0 if in_range else 0.0
        total_score += breakdown["founded_year"] * FOUNDED_YEAR_WEIGHT
        if in_range:
            reasons.append(f"Founded {year} in range")

    score = total_score / total_weight if total_weight > 0 else 0.0
    return IcpFitResult(score=round_half_up(score), breakdown=breakdown, reasons=reasons)
