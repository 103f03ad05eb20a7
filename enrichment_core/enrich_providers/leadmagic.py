"""
LeadMagic enrichment provider implementation.

LeadMagic wraps every payload as {"success": bool, "data": {...}, "error": str}.
"""

from typing import Any, Dict, Optional, Tuple

from .base import (
    BaseDataProvider,
    CompanyEnrichParams,
    EmailFindParams,
    EmailFindResult,
    PeopleEnrichParams,
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


def map_company(raw: Dict[str, Any]) -> UnifiedCompany:
    return UnifiedCompany(
        name=as_str(raw.get("company_name")) or "",
        domain=as_str(raw.get("domain")),
        linkedin_url=as_str(raw.get("linkedin_url")),
        website_url=as_str(raw.get("website")),
        industry=as_str(raw.get("industry")),
        employee_count=as_int(raw.get("employee_count")),
        employee_range=as_str(raw.get("employee_range")),
        annual_revenue=as_float(raw.get("revenue")),
        revenue_range=as_str(raw.get("revenue_range")),
        founded_year=as_int(raw.get("founded_year")),
        total_funding=as_float(raw.get("total_funding")),
        latest_funding_stage=as_str(raw.get("funding_stage")),
        city=as_str(raw.get("city")),
        state=as_str(raw.get("state")),
        country=as_str(raw.get("country")),
        address=as_str(raw.get("address")),
        description=as_str(raw.get("description")),
        phone=as_str(raw.get("phone")),
        logo_url=as_str(raw.get("logo_url")),
        tech_stack=as_str_list(raw.get("technologies")),
    )


def map_person(raw: Dict[str, Any]) -> UnifiedContact:
    return UnifiedContact(
        first_name=as_str(raw.get("first_name")),
        last_name=as_str(raw.get("last_name")),
        full_name=as_str(raw.get("full_name")),
        linkedin_url=as_str(raw.get("linkedin_url")),
        photo_url=as_str(raw.get("photo_url")),
        title=as_str(raw.get("title")),
        seniority=as_str(raw.get("seniority")),
        department=as_str(raw.get("department")),
        company_name=as_str(raw.get("company_name")),
        company_domain=as_str(raw.get("company_domain")),
        work_email=as_str(raw.get("work_email")),
        personal_email=as_str(raw.get("personal_email")),
        phone=as_str(raw.get("phone")),
        mobile_phone=as_str(raw.get("mobile_phone")),
        city=as_str(raw.get("city")),
        state=as_str(raw.get("state")),
        country=as_str(raw.get("country")),
    )


class LeadMagicProvider(BaseDataProvider):
    """LeadMagic API provider."""

    name = "leadmagic"
    display_name = "LeadMagic"
    capabilities = frozenset(
        {
            ProviderCapability.COMPANY_ENRICH,
            ProviderCapability.PEOPLE_ENRICH,
            ProviderCapability.EMAIL_FIND,
        }
    )
    base_url = "https://api.leadmagic.io"
    rate_limit_per_minute = 60

    def get_auth_headers(self) -> Dict[str, str]:
        return {"X-API-Key": self.api_key, "Content-Type": "application/json"}

    async def _post(self, path: str, body: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
        """POST and unwrap the envelope into (data, error); data is {} on a miss."""
        raw = as_dict(await self.request("post", path, json_body=body))
        error = as_str(raw.get("error"))
        if not raw.get("success"):
            return {}, error
        return as_dict(raw.get("data")), error

    async def enrich_company(
        self, params: CompanyEnrichParams
    ) -> ProviderResponse[UnifiedCompany]:
        try:
            body = {}
            if params.domain:
                body["domain"] = params.domain
            if params.name:
                body["company_name"] = params.name

            data, error = await self._post("/company/enrich", body)
            if not data:
                return ProviderResponse.failure(error or "No data returned")

            company = map_company(data)
            populated = get_populated_fields(company)
            return ProviderResponse(
                success=True,
                data=company,
                credits_consumed=1,
                fields_populated=populated,
                quality_score=min(len(populated) / 15, 1.0),
            )
        except Exception as exc:
            self.logger.error(f"LeadMagic company enrichment failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))

    async def enrich_person(
        self, params: PeopleEnrichParams
    ) -> ProviderResponse[UnifiedContact]:
        try:
            body = {
                key: value
                for key, value in (
                    ("linkedin_url", params.linkedin_url),
                    ("email", params.email),
                    ("first_name", params.first_name),
                    ("last_name", params.last_name),
                    ("company_domain", params.company_domain),
                )
                if value
            }
            data, error = await self._post("/people/enrich", body)
            if not data:
                return ProviderResponse.failure(error or "No data returned")

            contact = map_person(data)
            populated = get_populated_fields(contact)
            return ProviderResponse(
                success=True,
                data=contact,
                credits_consumed=1,
                fields_populated=populated,
                quality_score=min(len(populated) / 12, 1.0),
            )
        except Exception as exc:
            self.logger.error(f"LeadMagic person enrichment failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))

    async def find_email(
        self, params: EmailFindParams
    ) -> ProviderResponse[EmailFindResult]:
        try:
            data, error = await self._post(
                "/email/find",
                {
                    "first_name": params.first_name,
                    "last_name": params.last_name,
                    "domain": params.company_domain,
                },
            )
            email = as_str(data.get("email"))
            if not email:
                return ProviderResponse.failure(error or "Email not found")

            confidence = as_float(data.get("confidence")) or 0.0
            return ProviderResponse(
                success=True,
                data=EmailFindResult(email=email, confidence=confidence),
                credits_consumed=1,
                fields_populated=["email"],
                quality_score=min(max(confidence / 100, 0.0), 1.0),
            )
        except Exception as exc:
            self.logger.error(f"LeadMagic email find failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))
