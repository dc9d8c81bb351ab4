"""
Forager Client - people search and contact enrichment via the Forager API.

All endpoints live under /api/{account_id}/datastorage and take POST JSON.
Person ids are integers.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...config import (
    DEFAULT_PAGE_SIZE,
    ENRICH_BATCH_SIZE,
    FORAGER_API_URL,
    PROVIDER_TIMEOUT_SECONDS,
    require,
)
from ...models import (
    EnrichedPerson,
    ForagerSearchFilters,
    PersonBasic,
    PersonSearchResult,
    PhoneNumber,
    RoleInfo,
    SearchResponse,
)
from ..concurrency import settle_all
from ..enrichment import enrich_many
from .base import (
    ProviderHTTP,
    compute_has_more,
    optional_facet,
    sanitize_search_string,
    validate_paging,
)

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "/person_role_search/"
DETAIL_ENDPOINT = "/person_detail_lookup/"
PHONE_ENDPOINT = "/person_contacts_lookup/phone_numbers/"


def build_search_params(filters: ForagerSearchFilters, page: int) -> Dict[str, Any]:
    """Map Forager filters onto the person_role_search body. Unset fields are omitted."""
    params: Dict[str, Any] = {
        "role_is_current": True,
        "page": page,
    }

    # Person filters: industry is matched against the headline text
    if filters.person_industry:
        params["person_headline"] = sanitize_search_string(filters.person_industry)
    if filters.person_location:
        params["person_locations"] = [filters.person_location]

    # Company filters: industry is matched against the organization description
    if filters.company_industry:
        params["organization_description"] = sanitize_search_string(filters.company_industry)
    if filters.company_location:
        params["org_locations"] = [filters.company_location]
    if filters.company_keywords:
        # Role title matches keywords better than org name
        params["role_title"] = sanitize_search_string(filters.company_keywords)

    return params


def parse_search_result(item: Dict[str, Any], page: int, index: int) -> PersonSearchResult:
    person = item.get("person") or {}
    organization = item.get("organization") or {}
    linkedin_info = person.get("linkedin_info") or {}
    person_id = person.get("id")

    return PersonSearchResult(
        person=PersonBasic(
            id=f"{item.get('id')}-{person_id}-{page}-{index}",
            forager_person_id=str(person_id) if person_id else "",
            full_name=person.get("full_name") or "",
            first_name=person.get("first_name") or "",
            last_name=person.get("last_name") or "",
            photo=person.get("photo") or "",
            headline=person.get("headline") or "",
            linkedin_url=linkedin_info.get("public_profile_url") or "",
            source="forager",
        ),
        role=RoleInfo(
            title=item.get("title") or person.get("headline") or "",
            company_name=organization.get("name") or "",
            company_id=str(organization.get("id") or ""),
            is_current=True,
        ),
    )


def parse_phone_numbers(payload: Any) -> List[PhoneNumber]:
    """Phone lookup answers with a bare list; entries use phone_number or number."""
    if not isinstance(payload, list):
        return []
    phones = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        number = entry.get("phone_number") or entry.get("number") or ""
        if number:
            phones.append(PhoneNumber(phone_number=number, type=entry.get("type")))
    return phones


def _current_role(data: Dict[str, Any]) -> Optional[RoleInfo]:
    role = data.get("current_role")
    if not isinstance(role, dict):
        return None
    return RoleInfo(
        title=role.get("title") or role.get("role_title"),
        company_name=role.get("company_name") or (role.get("organization") or {}).get("name"),
        company_id=str(role["company_id"]) if role.get("company_id") else None,
        is_current=True,
    )


def parse_person_detail(data: Dict[str, Any], person_id: str, phones: List[PhoneNumber]) -> EnrichedPerson:
    linkedin_info = data.get("linkedin_info") or {}
    location = data.get("location")
    if isinstance(location, dict):
        location = location.get("name")

    return EnrichedPerson(
        id=str(data.get("id") or person_id),
        full_name=data.get("full_name") or "",
        first_name=data.get("first_name") or "",
        last_name=data.get("last_name") or "",
        photo=data.get("photo") or "",
        headline=data.get("headline") or "",
        linkedin_url=data.get("linkedin_url") or linkedin_info.get("public_profile_url") or "",
        work_emails=list(data.get("work_emails") or []),
        personal_emails=list(data.get("personal_emails") or []),
        phone_numbers=phones,
        skills=list(data.get("skills") or []),
        location=location or "",
        summary=data.get("summary") or data.get("description") or "",
        current_role=_current_role(data),
        source="forager",
    )


class ForagerClient:
    """Async adapter over the Forager datastorage API."""

    source = "forager"
    numeric_ids = True

    def __init__(
        self,
        api_key: Optional[str] = None,
        account_id: Optional[str] = None,
        base_url: str = FORAGER_API_URL,
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        api_key = api_key or require("FORAGER_API_KEY")
        account_id = account_id or require("FORAGER_ACCOUNT_ID")
        self.http = ProviderHTTP(
            "Forager",
            f"{base_url.rstrip('/')}/api/{account_id}/datastorage",
            headers={"X-API-KEY": api_key},
            timeout=timeout,
            transport=transport,
        )

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Any:
        return await self.http.request("POST", endpoint, json=body)

    # ========================================================================
    # SEARCH
    # ========================================================================

    async def search_raw(self, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = await self._post(SEARCH_ENDPOINT, body) or {}
        return data.get("search_results") or []

    async def search(
        self,
        filters: ForagerSearchFilters,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> SearchResponse:
        validate_paging(page, page_size)
        body = build_search_params(filters, page)
        data = await self._post(SEARCH_ENDPOINT, body) or {}

        items = data.get("search_results") or []
        results = [parse_search_result(item, page, index) for index, item in enumerate(items)]
        logger.info("[Forager] Page %d returned %d result(s)", page, len(results))

        return SearchResponse(
            results=results,
            total_count=data.get("total_search_results") or len(results),
            page=page,
            page_size=page_size,
            has_more=compute_has_more(len(results), page_size),
        )

    # ========================================================================
    # ENRICHMENT
    # ========================================================================

    async def lookup_phone_numbers(self, person_id: int) -> List[PhoneNumber]:
        payload = await self._post(PHONE_ENDPOINT, {"person_id": person_id})
        return parse_phone_numbers(payload)

    async def lookup_person_detail(self, person_id: int) -> Optional[Dict[str, Any]]:
        return await self._post(DETAIL_ENDPOINT, {"person_id": person_id})

    async def enrich(self, person_id: str) -> Optional[EnrichedPerson]:
        """
        Fetch detail and phone numbers for one person.

        Returns:
            EnrichedPerson, or None when the detail lookup fails or is empty.
            A failed phone lookup only empties phone_numbers.
        """
        try:
            numeric_id = int(str(person_id).strip())
        except ValueError:
            logger.warning("[Forager] Non-numeric person id %r", person_id)
            return None

        detail_outcome, phones_outcome = await settle_all([
            self.lookup_person_detail(numeric_id),
            optional_facet("Forager phone", self.lookup_phone_numbers(numeric_id)),
        ])
        if not detail_outcome.ok:
            logger.warning("[Forager] Detail lookup failed for %s: %s", person_id, detail_outcome.error)
            return None
        detail = detail_outcome.value
        if not detail:
            return None

        phones = phones_outcome.value if phones_outcome.ok else []
        logger.debug("[Forager] %s -> %d phone number(s)", person_id, len(phones))
        return parse_person_detail(detail, str(person_id), phones)

    async def enrich_many(self, person_ids: List[str], batch_size: int = ENRICH_BATCH_SIZE) -> List[EnrichedPerson]:
        return await enrich_many(person_ids, self.enrich, numeric=True, batch_size=batch_size, label="Forager")

    async def aclose(self) -> None:
        await self.http.aclose()
