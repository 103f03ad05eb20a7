"""
Apollo.io enrichment provider implementation.

Covers company search and enrichment plus people search and matching.
Searches are free; enrichment and person match cost one credit each.
"""

import re
from typing import Any, Dict, List, Optional

from .base import (
    BaseDataProvider,
    CompanyEnrichParams,
    CompanySearchParams,
    EmploymentRecord,
    PaginatedResponse,
    PeopleEnrichParams,
    PeopleSearchParams,
    ProviderCapability,
    ProviderResponse,
    UnifiedCompany,
    UnifiedContact,
    as_dict,
    as_float,
    as_int,
    as_str,
    as_str_list,
    get_populated_fields,
)

_SENIORITY_MAP = {
    "c_suite": "c_suite",
    "owner": "c_suite",
    "founder": "c_suite",
    "partner": "c_suite",
    "vp": "vp",
    "vice_president": "vp",
    "director": "director",
    "manager": "manager",
    "senior": "senior",
    "entry": "entry",
    "intern": "entry",
}

MAX_PAGE_SIZE = 100


def _domain_from_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    return as_str(re.sub(r"/.*$", "", re.sub(r"^https?://", "", url)))


def normalize_seniority(raw: Any) -> Optional[str]:
    value = as_str(raw)
    if not value:
        return None
    value = value.lower()
    return _SENIORITY_MAP.get(value, value)


def map_organization(raw: Dict[str, Any]) -> Optional[UnifiedCompany]:
    """Map an Apollo organization payload; None when it has no name."""
    name = as_str(raw.get("name"))
    if not name:
        return None
    website_url = as_str(raw.get("website_url"))
    external_id = as_str(raw.get("id"))
    return UnifiedCompany(
        name=name,
        domain=as_str(raw.get("primary_domain")) or _domain_from_url(website_url),
        linkedin_url=as_str(raw.get("linkedin_url")),
        website_url=website_url,
        industry=as_str(raw.get("industry")),
        sub_industry=as_str(raw.get("sub_industry")),
        employee_count=as_int(raw.get("estimated_num_employees")),
        employee_range=as_str(raw.get("employee_range")),
        annual_revenue=as_float(raw.get("annual_revenue")),
        founded_year=as_int(raw.get("founded_year")),
        total_funding=as_float(raw.get("total_funding")),
        latest_funding_stage=as_str(raw.get("latest_funding_stage")),
        latest_funding_date=as_str(raw.get("latest_funding_round_date")),
        city=as_str(raw.get("city")),
        state=as_str(raw.get("state")),
        country=as_str(raw.get("country")),
        address=as_str(raw.get("street_address")),
        tech_stack=as_str_list(raw.get("technology_names")),
        logo_url=as_str(raw.get("logo_url")),
        description=as_str(raw.get("short_description")),
        phone=as_str(raw.get("phone")),
        external_ids={"apollo": external_id} if external_id else {},
    )


def _phone_of_type(phones: Any, phone_type: str) -> Optional[str]:
    if not isinstance(phones, list):
        return None
    for phone in phones:
        phone = as_dict(phone)
        if phone.get("type") == phone_type:
            return as_str(phone.get("raw_number"))
    return None


def map_person(raw: Dict[str, Any]) -> UnifiedContact:
    organization = as_dict(raw.get("organization"))
    departments = as_str_list(raw.get("departments"))
    history = raw.get("employment_history")
    employment_history = None
    if isinstance(history, list):
        employment_history = [
            EmploymentRecord(
                company=as_str(entry.get("organization_name")) or "",
                title=as_str(entry.get("title")) or "",
                start_date=as_str(entry.get("start_date")),
                end_date=as_str(entry.get("end_date")),
                is_current=bool(entry.get("current")),
            )
            for entry in history
            if isinstance(entry, dict)
        ] or None
    external_id = as_str(raw.get("id"))

    return UnifiedContact(
        first_name=as_str(raw.get("first_name")),
        last_name=as_str(raw.get("last_name")),
        full_name=as_str(raw.get("name")),
        linkedin_url=as_str(raw.get("linkedin_url")),
        photo_url=as_str(raw.get("photo_url")),
        title=as_str(raw.get("title")),
        seniority=normalize_seniority(raw.get("seniority")),
        department=departments[0] if departments else None,
        company_name=as_str(organization.get("name")),
        company_domain=as_str(organization.get("primary_domain")),
        # Only verified addresses are trusted as work email
        work_email=as_str(raw.get("email")) if raw.get("email_status") == "verified" else None,
        phone=_phone_of_type(raw.get("phone_numbers"), "work"),
        mobile_phone=_phone_of_type(raw.get("phone_numbers"), "mobile"),
        city=as_str(raw.get("city")),
        state=as_str(raw.get("state")),
        country=as_str(raw.get("country")),
        employment_history=employment_history,
        external_ids={"apollo": external_id} if external_id else {},
    )


def _page_for(limit: Optional[int], offset: Optional[int]) -> Dict[str, int]:
    return {
        "per_page": min(limit or 25, MAX_PAGE_SIZE),
        "page": offset // MAX_PAGE_SIZE + 1 if offset else 1,
    }


class ApolloProvider(BaseDataProvider):
    """Apollo.io API provider."""

    name = "apollo"
    display_name = "Apollo.io"
    capabilities = frozenset(
        {
            ProviderCapability.COMPANY_SEARCH,
            ProviderCapability.COMPANY_ENRICH,
            ProviderCapability.PEOPLE_SEARCH,
            ProviderCapability.PEOPLE_ENRICH,
        }
    )
    base_url = "https://api.apollo.io/api/v1"
    rate_limit_per_second = 5
    rate_limit_per_minute = 100

    def get_auth_headers(self) -> Dict[str, str]:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    async def search_companies(
        self, params: CompanySearchParams
    ) -> PaginatedResponse[UnifiedCompany]:
        try:
            body: Dict[str, Any] = _page_for(params.limit, params.offset)
            if params.industries:
                body["organization_industries"] = params.industries
            if params.employee_count_min or params.employee_count_max:
                body["organization_num_employees_ranges"] = [
                    f"{params.employee_count_min or 1},{params.employee_count_max or 1000000}"
                ]
            if params.countries:
                body["organization_locations"] = params.countries
            if params.keywords:
                body["q_organization_keyword_tags"] = params.keywords

            raw = as_dict(await self.request("post", "/mixed_companies/search", json_body=body))
            companies = [
                company
                for company in (map_organization(as_dict(org)) for org in raw.get("organizations") or [])
                if company is not None
            ]
            return self._paginated(companies, raw, ["name", "domain", "industry"], 0.5)
        except Exception as exc:
            self.logger.error(f"Apollo company search failed: {exc}")
            return PaginatedResponse.failure(str(exc))

    async def enrich_company(
        self, params: CompanyEnrichParams
    ) -> ProviderResponse[UnifiedCompany]:
        try:
            query = {"domain": params.domain} if params.domain else {}
            raw = as_dict(await self.request("get", "/organizations/enrich", params=query))
            company = map_organization(as_dict(raw.get("organization")))
            if company is None:
                return ProviderResponse.failure("No organization found")

            populated = get_populated_fields(company)
            return ProviderResponse(
                success=True,
                data=company,
                credits_consumed=1,
                fields_populated=populated,
                quality_score=min(len(populated) / 15, 1.0),
            )
        except Exception as exc:
            self.logger.error(f"Apollo company enrichment failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))

    async def search_people(
        self, params: PeopleSearchParams
    ) -> PaginatedResponse[UnifiedContact]:
        try:
            body: Dict[str, Any] = _page_for(params.limit, params.offset)
            if params.title_patterns:
                body["person_titles"] = params.title_patterns
            if params.seniority_levels:
                body["person_seniorities"] = params.seniority_levels
            if params.departments:
                body["person_departments"] = params.departments
            if params.company_domains:
                body["organization_domains"] = params.company_domains
            if params.countries:
                body["person_locations"] = params.countries

            raw = as_dict(await self.request("post", "/mixed_people/search", json_body=body))
            contacts = [map_person(as_dict(person)) for person in raw.get("people") or []]
            return self._paginated(contacts, raw, ["name", "title", "company", "linkedin"], 0.6)
        except Exception as exc:
            self.logger.error(f"Apollo people search failed: {exc}")
            return PaginatedResponse.failure(str(exc))

    async def enrich_person(
        self, params: PeopleEnrichParams
    ) -> ProviderResponse[UnifiedContact]:
        try:
            body = {
                key: value
                for key, value in (
                    ("first_name", params.first_name),
                    ("last_name", params.last_name),
                    ("email", params.email),
                    ("linkedin_url", params.linkedin_url),
                    ("organization_domain", params.company_domain),
                )
                if value
            }
            raw = as_dict(await self.request("post", "/people/match", json_body=body))
            person = raw.get("person")
            if not isinstance(person, dict) or not person:
                return ProviderResponse.failure("No person found")

            contact = map_person(person)
            populated = get_populated_fields(contact)
            return ProviderResponse(
                success=True,
                data=contact,
                credits_consumed=1,
                fields_populated=populated,
                quality_score=min(len(populated) / 12, 1.0),
            )
        except Exception as exc:
            self.logger.error(f"Apollo person enrichment failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))

    @staticmethod
    def _paginated(
        records: List[Any], raw: Dict[str, Any], fields_populated: List[str], quality: float
    ) -> PaginatedResponse:
        pagination = as_dict(raw.get("pagination"))
        page = as_int(pagination.get("page")) or 1
        total_pages = as_int(pagination.get("total_pages")) or 0
        return PaginatedResponse(
            success=True,
            data=records,
            total_results=as_int(pagination.get("total_entries")) or len(records),
            has_more=page < total_pages,
            next_page_token=page + 1,
            credits_consumed=0,
            fields_populated=fields_populated,
            quality_score=quality,
        )
