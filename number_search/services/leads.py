"""
Lead Reconciliation - turn enriched profiles into contactable leads.

Only people with at least one phone number become leads. Role and company
come from the search row the user picked when available, since enrichment may
report a different current role than the listing that matched.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from ..models import (
    ContactRecord,
    EnrichedPerson,
    Lead,
    PersonSearchResult,
    SearchFilters,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

NO_PHONE_NUMBERS_MESSAGE = "No phone numbers found for the selected profiles."


@dataclass
class ReconcileResult:
    new_leads: List[Lead] = field(default_factory=list)
    skipped_no_phone: int = 0
    already_listed: int = 0

    @property
    def is_empty(self) -> bool:
        """True when nobody selected had a phone number. Not an error condition."""
        return not self.new_leads and not self.already_listed


def _search_rows_by_person_id(search_results: Optional[Iterable[PersonSearchResult]]) -> Dict[str, PersonSearchResult]:
    # Keyed by provider person id, the id enrichment echoes back
    return {r.person.forager_person_id: r for r in search_results or []}


def to_lead(person: EnrichedPerson, search_row: Optional[PersonSearchResult], added_at: str) -> Lead:
    role = search_row.role if search_row else None
    current = person.current_role

    return Lead(
        id=person.id,
        full_name=person.full_name,
        role_title=(role.title if role else None) or (current.title if current else None) or "",
        company_name=(role.company_name if role else None) or (current.company_name if current else None) or "",
        phone_number=person.phone_numbers[0].phone_number,
        email=person.primary_email(),
        linkedin_url=person.linkedin_url,
        location=person.location,
        headline=person.headline,
        source=person.source,
        added_at=added_at,
    )


def reconcile(
    enriched: List[EnrichedPerson],
    existing_leads: List[Lead],
    search_results: Optional[List[PersonSearchResult]] = None,
    now: Optional[str] = None,
) -> ReconcileResult:
    """
    Build new leads from enriched people.

    Args:
        enriched: Enrichment output, possibly from both providers
        existing_leads: Leads already on the list; never overwritten
        search_results: Rows the user selected, for search-time role/company
        now: Timestamp stamped on every new lead (defaults to current UTC)

    Returns:
        ReconcileResult with leads in enrichment order, excluding ids already
        present in existing_leads or earlier in this batch, and the count of
        people skipped for having no phone number
    """
    added_at = now or utc_now_iso()
    rows = _search_rows_by_person_id(search_results)
    seen = {lead.id for lead in existing_leads}

    result = ReconcileResult()
    for person in enriched:
        if not person.phone_numbers:
            result.skipped_no_phone += 1
            continue
        if person.id in seen:
            result.already_listed += 1
            continue
        seen.add(person.id)
        result.new_leads.append(to_lead(person, rows.get(person.id), added_at))

    logger.info(
        "[Leads] %d new lead(s), %d without phone, %d already listed",
        len(result.new_leads),
        result.skipped_no_phone,
        result.already_listed,
    )
    return result


# ============================================================================
# PERSISTENCE MAPPING
# ============================================================================

def describe_filters(filters: Union[SearchFilters, Dict[str, Any], None]) -> str:
    """Render set filter fields as "key:value, ..." for the contact audit trail."""
    if filters is None:
        return ""
    if isinstance(filters, dict):
        values = filters
    else:
        values = filters.model_dump(by_alias=True, exclude_none=True)
    return ", ".join(f"{key}:{value}" for key, value in values.items() if value)


def leads_to_contacts(leads: List[Lead], search_query: str = "") -> List[ContactRecord]:
    return [
        ContactRecord(
            phone_number=lead.phone_number,
            full_name=lead.full_name,
            role=lead.role_title,
            company=lead.company_name,
            headline=lead.headline,
            location=lead.location,
            linkedin_url=lead.linkedin_url,
            source=lead.source,
            source_id=lead.id,
            raw_data={
                "email": lead.email,
                "search_query": search_query,
                "added_at": lead.added_at,
            },
        )
        for lead in leads
    ]
