"""
Prospeo enrichment provider implementation.

Prospeo answers {"error": bool, "message": str, "response": ...}. Email
verification is priced at a fraction of a credit; people search is billed
per returned contact.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .base import (
    BaseDataProvider,
    EmailFindParams,
    EmailFindResult,
    EmailVerificationResult,
    EmailVerifyParams,
    PaginatedResponse,
    PeopleEnrichParams,
    PeopleSearchParams,
    ProviderCapability,
    ProviderResponse,
    UnifiedContact,
    as_dict,
    as_float,
    as_int,
    as_str,
    get_populated_fields,
)

VERIFY_COST = 0.05
SEARCH_COST_PER_CONTACT = 0.1
VERIFICATION_STATUSES = {"valid", "invalid", "catch_all", "unknown"}


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
        work_email=as_str(raw.get("email")),
        phone=as_str(raw.get("phone")),
        city=as_str(raw.get("city")),
        state=as_str(raw.get("state")),
        country=as_str(raw.get("country")),
    )


class ProspeoProvider(BaseDataProvider):
    """Prospeo API provider."""

    name = "prospeo"
    display_name = "Prospeo"
    capabilities = frozenset(
        {
            ProviderCapability.EMAIL_FIND,
            ProviderCapability.EMAIL_VERIFY,
            ProviderCapability.PEOPLE_ENRICH,
            ProviderCapability.PEOPLE_SEARCH,
        }
    )
    base_url = "https://api.prospeo.io"
    rate_limit_per_minute = 60

    def get_auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def _post(self, path: str, body: Dict[str, Any]) -> Tuple[Any, Optional[str]]:
        """POST and unwrap into (response, error message); response is None on error."""
        raw = as_dict(await self.request("post", path, json_body=body))
        if raw.get("error"):
            return None, as_str(raw.get("message")) or "Request failed"
        return raw.get("response"), None

    async def find_email(
        self, params: EmailFindParams
    ) -> ProviderResponse[EmailFindResult]:
        try:
            response, error = await self._post(
                "/email-finder",
                {
                    "first_name": params.first_name,
                    "last_name": params.last_name,
                    "company": params.company_domain,
                },
            )
            response = as_dict(response)
            email = as_str(response.get("email"))
            if not email:
                return ProviderResponse.failure(error or "Email not found")

            confidence = as_float(response.get("confidence")) or 0.0
            return ProviderResponse(
                success=True,
                data=EmailFindResult(email=email, confidence=confidence),
                credits_consumed=1,
                fields_populated=["email"],
                quality_score=min(max(confidence / 100, 0.0), 1.0),
            )
        except Exception as exc:
            self.logger.error(f"Prospeo email find failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))

    async def verify_email(
        self, params: EmailVerifyParams
    ) -> ProviderResponse[EmailVerificationResult]:
        try:
            response, error = await self._post("/email-verifier", {"email": params.email})
            if error:
                return ProviderResponse.failure(error)

            response = as_dict(response)
            status = as_str(response.get("result"))
            if status not in VERIFICATION_STATUSES:
                status = "unknown"
            result = EmailVerificationResult(
                email=as_str(response.get("email")) or params.email,
                status=status,
                provider=self.name,
                confidence=as_float(response.get("score")),
                verified_at=datetime.now(timezone.utc).isoformat(),
            )
            return ProviderResponse(
                success=True,
                data=result,
                credits_consumed=VERIFY_COST,
                fields_populated=["email_verification_status"],
                quality_score=1.0 if status == "valid" else 0.5,
            )
        except Exception as exc:
            self.logger.error(f"Prospeo email verification failed for {params.email}: {exc}")
            return ProviderResponse.failure(str(exc))

    async def enrich_person(
        self, params: PeopleEnrichParams
    ) -> ProviderResponse[UnifiedContact]:
        try:
            body = {
                key: value
                for key, value in (
                    ("email", params.email),
                    ("linkedin_url", params.linkedin_url),
                    ("first_name", params.first_name),
                    ("last_name", params.last_name),
                )
                if value
            }
            response, error = await self._post("/person-search", body)
            if not isinstance(response, dict) or not response:
                return ProviderResponse.failure(error or "No data found")

            contact = map_person(response)
            populated = get_populated_fields(contact)
            return ProviderResponse(
                success=True,
                data=contact,
                credits_consumed=1,
                fields_populated=populated,
                quality_score=min(len(populated) / 12, 1.0),
            )
        except Exception as exc:
            self.logger.error(f"Prospeo person enrichment failed for {params}: {exc}")
            return ProviderResponse.failure(str(exc))

    async def search_people(
        self, params: PeopleSearchParams
    ) -> PaginatedResponse[UnifiedContact]:
        try:
            body: Dict[str, Any] = {
                "limit": min(params.limit or 25, 100),
                "page": params.offset // 100 + 1 if params.offset else 1,
            }
            if params.title_patterns:
                body["titles"] = params.title_patterns
            if params.company_domains:
                body["domains"] = params.company_domains
            if params.countries:
                body["locations"] = params.countries

            # The search endpoint returns a list under "response" plus pagination
            raw = as_dict(await self.request("post", "/people-search", json_body=body))
            if raw.get("error"):
                return PaginatedResponse.failure(as_str(raw.get("message")) or "Search failed")

            results = raw.get("response")
            contacts = [
                map_person(entry)
                for entry in (results if isinstance(results, list) else [])
                if isinstance(entry, dict)
            ]
            pagination = as_dict(raw.get("pagination"))
            total = as_int(pagination.get("total"))
            if total is None:
                total = len(contacts)
            page = as_int(pagination.get("page")) or 1
            per_page = as_int(pagination.get("per_page")) or 25

            return PaginatedResponse(
                success=True,
                data=contacts,
                total_results=total,
                has_more=page * per_page < total,
                next_page_token=page + 1 if page * per_page < total else None,
                credits_consumed=round(len(contacts) * SEARCH_COST_PER_CONTACT, 2),
                fields_populated=["name", "title", "email", "company"],
                quality_score=0.7,
            )
        except Exception as exc:
            self.logger.error(f"Prospeo people search failed: {exc}")
            return PaginatedResponse.failure(str(exc))
