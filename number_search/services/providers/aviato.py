"""
Aviato Client - people search, company search and enrichment via the Aviato API.

Search hits only carry an id and a name, so each page is detail-enriched
concurrently to fill in headline, title and company. Industry filters go
through the company resolver before the people search runs.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ...config import (
    AVIATO_API_URL,
    COMPANY_SEARCH_LIMIT,
    DEFAULT_PAGE_SIZE,
    ENRICH_BATCH_SIZE,
    PROVIDER_TIMEOUT_SECONDS,
    require,
)
from ...models import (
    AviatoSearchFilters,
    CompanyMatch,
    EnrichedPerson,
    PersonBasic,
    PersonSearchResult,
    PhoneNumber,
    RoleInfo,
    SearchResponse,
)
from ..concurrency import settle_all
from ..enrichment import enrich_many
from ..matching.company_resolver import resolve_industry_to_people_filters
from .base import (
    ProviderHTTP,
    compute_has_more,
    current_role,
    normalize_url,
    optional_facet,
    validate_paging,
)

logger = logging.getLogger(__name__)

PEOPLE_SEARCH_ENDPOINT = "/person/simple/search"
PERSON_ENRICH_ENDPOINT = "/person/enrich"
PHONE_ENDPOINT = "/person/phone"
EMAIL_ENDPOINT = "/person/email"
COMPANY_SEARCH_ENDPOINT = "/company/simple/search"

# Filter field -> query parameter
_PARAM_NAMES = {
    "headline": "headline",
    "country": "country",
    "company_name": "currentCompanyNames",
    "skills": "skills",
    "linkedin_connections": "minLinkedinConnections",
    "role_description": "currentPositionDescription",
    "company_linkedin_ids": "currentCompanyLinkedinIDs",
}

_COMPANY_SLUG = re.compile(r"linkedin\.com/company/([^/?#]+)", re.IGNORECASE)


def build_search_params(filters: AviatoSearchFilters, page: int, page_size: int) -> Dict[str, str]:
    """Map Aviato filters onto query parameters. Unset fields are omitted."""
    params = {
        "page": str(page),
        "perPage": str(page_size),
    }
    for field, param in _PARAM_NAMES.items():
        value = getattr(filters, field)
        if value:
            params[param] = str(value)
    return params


def parse_company(item: Dict[str, Any]) -> CompanyMatch:
    slug = item.get("linkedinID") or ""
    if not slug:
        match = _COMPANY_SLUG.search((item.get("URLs") or {}).get("linkedin") or "")
        if match:
            slug = match.group(1)
    return CompanyMatch(id=str(item.get("id") or ""), name=item.get("name") or "", linkedin_slug=slug)


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_total_count(data: Dict[str, Any], fallback: int) -> int:
    """totalResults, else count.value, else the number of results returned."""
    total = _as_int(data.get("totalResults"))
    if total is not None:
        return total
    count = data.get("count")
    value = count.get("value") if isinstance(count, dict) else None
    return _as_int(value) or fallback


def parse_search_result(
    item: Dict[str, Any],
    enriched: Optional[Dict[str, Any]],
    page: int,
    index: int,
) -> PersonSearchResult:
    """Build a search row, preferring detail fields and falling back to the hit."""
    details = enriched or {}
    role = current_role(details.get("experienceList"))
    linkedin_url = normalize_url((details.get("URLs") or {}).get("linkedin") or (item.get("URLs") or {}).get("linkedin"))

    return PersonSearchResult(
        person=PersonBasic(
            id=f"aviato-{item.get('id')}-{page}-{index}",
            forager_person_id=str(item.get("id") or ""),
            full_name=details.get("fullName") or item.get("fullName") or "",
            first_name=details.get("firstName") or "",
            last_name=details.get("lastName") or "",
            headline=details.get("headline") or "",
            linkedin_url=linkedin_url,
            source="aviato",
        ),
        role=RoleInfo(
            title=(role or {}).get("title") or details.get("headline") or "",
            company_name=(role or {}).get("company_name") or "",
            company_id=(role or {}).get("company_id") or "",
            is_current=True,
        ),
    )


def parse_phones(data: Any) -> List[PhoneNumber]:
    phones = (data or {}).get("phones") or []
    if not isinstance(phones, list):
        return []
    return [PhoneNumber(phone_number=p["phoneNumber"]) for p in phones if isinstance(p, dict) and p.get("phoneNumber")]


def parse_emails(data: Any) -> List[Dict[str, Optional[str]]]:
    emails = (data or {}).get("emails") or []
    if not isinstance(emails, list):
        return []
    return [{"email": e["email"], "type": e.get("type")} for e in emails if isinstance(e, dict) and e.get("email")]


def parse_enriched_person(
    person: Dict[str, Any],
    person_id: str,
    phones: List[PhoneNumber],
    emails: List[Dict[str, Optional[str]]],
) -> EnrichedPerson:
    role = current_role(person.get("experienceList"))
    work = [e["email"] for e in emails if e["type"] == "work"]
    personal = [e["email"] for e in emails if e["type"] == "personal"]
    full_name = person.get("fullName") or f"{person.get('firstName') or ''} {person.get('lastName') or ''}".strip()

    return EnrichedPerson(
        id=str(person.get("id") or person_id),
        full_name=full_name,
        first_name=person.get("firstName") or "",
        last_name=person.get("lastName") or "",
        headline=person.get("headline") or "",
        linkedin_url=normalize_url((person.get("URLs") or {}).get("linkedin")),
        # Untyped emails count as work emails
        work_emails=work if work else [e["email"] for e in emails],
        personal_emails=personal,
        phone_numbers=phones,
        skills=list(person.get("skills") or []),
        location=person.get("location") or "",
        summary=person.get("about") or person.get("headline") or "",
        current_role=RoleInfo(
            title=role["title"],
            company_name=role["company_name"],
            company_id=role["company_id"],
            is_current=True,
        ) if role else None,
        source="aviato",
    )


class AviatoClient:
    """Async adapter over the Aviato data API."""

    source = "aviato"
    numeric_ids = False

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = AVIATO_API_URL,
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        api_key = api_key or require("AVIATO_API_KEY")
        self.http = ProviderHTTP(
            "Aviato",
            base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    async def _get(self, endpoint: str, params: Dict[str, str]) -> Any:
        return await self.http.request("GET", endpoint, params=params)

    # ========================================================================
    # COMPANY SEARCH
    # ========================================================================

    async def search_companies_by_industry(self, industry: str, limit: int = COMPANY_SEARCH_LIMIT) -> List[CompanyMatch]:
        data = await self._get(COMPANY_SEARCH_ENDPOINT, {"industryList": industry, "perPage": str(limit)}) or {}
        return [parse_company(item) for item in data.get("items") or []]

    # ========================================================================
    # PEOPLE SEARCH
    # ========================================================================

    async def search_by_name(self, full_name: str, per_page: int = 1) -> List[Dict[str, Any]]:
        params = {"fullName": full_name, "page": "1", "perPage": str(per_page)}
        data = await self._get(PEOPLE_SEARCH_ENDPOINT, params) or {}
        return data.get("items") or []

    async def get_person(self, person_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(PERSON_ENRICH_ENDPOINT, {"id": person_id})

    async def search(
        self,
        filters: AviatoSearchFilters,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> SearchResponse:
        validate_paging(page, page_size)
        people_filters, company_matches = await resolve_industry_to_people_filters(
            filters, self.search_companies_by_industry
        )

        params = build_search_params(people_filters, page, page_size)
        data = await self._get(PEOPLE_SEARCH_ENDPOINT, params) or {}
        items = data.get("items") or []

        if not items:
            return SearchResponse(
                results=[],
                total_count=0,
                page=page,
                page_size=page_size,
                has_more=False,
                company_matches=company_matches,
            )

        # Search hits are sparse; pull details for the whole page at once
        details = await settle_all(self.get_person(str(item.get("id"))) for item in items)
        results = [
            parse_search_result(item, outcome.value if outcome.ok else None, page, index)
            for index, (item, outcome) in enumerate(zip(items, details))
        ]
        logger.info("[Aviato] Page %d returned %d result(s)", page, len(results))

        return SearchResponse(
            results=results,
            total_count=parse_total_count(data, len(results)),
            page=page,
            page_size=page_size,
            has_more=compute_has_more(len(results), page_size),
            company_matches=company_matches,
        )

    # ========================================================================
    # ENRICHMENT
    # ========================================================================

    async def lookup_phone_numbers(self, person_id: str) -> List[PhoneNumber]:
        return parse_phones(await self._get(PHONE_ENDPOINT, {"id": person_id}))

    async def lookup_emails(self, person_id: str) -> List[Dict[str, Optional[str]]]:
        return parse_emails(await self._get(EMAIL_ENDPOINT, {"id": person_id}))

    async def enrich(self, person_id: str) -> Optional[EnrichedPerson]:
        """
        Fetch profile, phones and emails for one person concurrently.

        Returns:
            EnrichedPerson, or None when the profile lookup fails or is empty.
            Failed phone or email lookups only empty that field.
        """
        person_outcome, phones_outcome, emails_outcome = await settle_all([
            self.get_person(person_id),
            optional_facet("Aviato phone", self.lookup_phone_numbers(person_id)),
            optional_facet("Aviato email", self.lookup_emails(person_id)),
        ])
        if not person_outcome.ok:
            logger.warning("[Aviato] Profile lookup failed for %s: %s", person_id, person_outcome.error)
            return None
        if not person_outcome.value:
            return None

        phones = phones_outcome.value if phones_outcome.ok else []
        emails = emails_outcome.value if emails_outcome.ok else []
        return parse_enriched_person(person_outcome.value, person_id, phones, emails)

    async def enrich_many(self, person_ids: List[str], batch_size: int = ENRICH_BATCH_SIZE) -> List[EnrichedPerson]:
        return await enrich_many(person_ids, self.enrich, numeric=False, batch_size=batch_size, label="Aviato")

    async def aclose(self) -> None:
        await self.http.aclose()
