"""
Data models shared by the providers, pipelines and routers.

Filter models are frozen: changing a filter set means building a new one with
model_copy(update=...). Request bodies accept the console's camelCase keys.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DataSource = Literal["forager", "aviato"]
LookupStatus = Literal["found", "not_found", "error"]


# ============================================
# Search filters
# ============================================

class ForagerSearchFilters(BaseModel):
    """Forager people-search filters. None means unconstrained."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    person_industry: Optional[str] = Field(default=None, alias="personIndustry")
    person_location: Optional[str] = Field(default=None, alias="personLocation")
    company_industry: Optional[str] = Field(default=None, alias="companyIndustry")
    company_location: Optional[str] = Field(default=None, alias="companyLocation")
    company_keywords: Optional[str] = Field(default=None, alias="companyKeywords")


class AviatoSearchFilters(BaseModel):
    """Aviato people-search filters. None means unconstrained."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    headline: Optional[str] = None
    country: Optional[str] = None
    company_name: Optional[str] = Field(default=None, alias="companyName")
    skills: Optional[str] = None
    linkedin_connections: Optional[int] = Field(default=None, alias="linkedinConnections")
    role_description: Optional[str] = Field(default=None, alias="roleDescription")
    company_industry: Optional[str] = Field(default=None, alias="companyIndustry")
    # Comma-joined employer slugs, filled in by the company resolver
    company_linkedin_ids: Optional[str] = Field(default=None, alias="companyLinkedinIds")


SearchFilters = Union[ForagerSearchFilters, AviatoSearchFilters]


def filters_key(source: str, filters: SearchFilters) -> str:
    """Stable cache key for a (source, filter set) pair."""
    payload = filters.model_dump(exclude_none=True)
    return f"{source}:{json.dumps(payload, sort_keys=True)}"


# ============================================
# Search results
# ============================================

class PersonBasic(BaseModel):
    id: str                   # display-unique composite key
    forager_person_id: str    # provider person id, used for enrichment
    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    photo: str = ""
    headline: str = ""
    linkedin_url: str = ""
    source: DataSource


class RoleInfo(BaseModel):
    title: Optional[str] = None
    company_name: Optional[str] = None
    company_id: Optional[str] = None
    is_current: Optional[bool] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class PersonSearchResult(BaseModel):
    person: PersonBasic
    role: RoleInfo


class CompanyMatch(BaseModel):
    id: str
    name: str = ""
    linkedin_slug: str = ""


class SearchResponse(BaseModel):
    results: List[PersonSearchResult] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10
    has_more: bool = False
    company_matches: List[CompanyMatch] = Field(default_factory=list)


# ============================================
# Enrichment
# ============================================

class PhoneNumber(BaseModel):
    phone_number: str
    type: Optional[str] = None


class EnrichedPerson(BaseModel):
    id: str
    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    photo: str = ""
    headline: str = ""
    linkedin_url: str = ""
    work_emails: List[str] = Field(default_factory=list)
    personal_emails: List[str] = Field(default_factory=list)
    phone_numbers: List[PhoneNumber] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    location: str = ""
    summary: str = ""
    current_role: Optional[RoleInfo] = None
    source: DataSource

    def primary_email(self) -> str:
        if self.work_emails:
            return self.work_emails[0]
        if self.personal_emails:
            return self.personal_emails[0]
        return ""


# ============================================
# Leads and contacts
# ============================================

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Lead(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str                   # provider person id
    full_name: str = ""
    role_title: str = ""
    company_name: str = ""
    phone_number: str
    email: str = ""
    linkedin_url: str = ""
    location: str = ""
    headline: str = ""
    source: DataSource
    added_at: str = Field(default_factory=utc_now_iso)


class ContactRecord(BaseModel):
    """Row in the Supabase contacts table, keyed by phone_number."""

    phone_number: str
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    headline: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    source: str
    source_id: Optional[str] = None
    raw_data: Dict[str, Any] = Field(default_factory=dict)


# ============================================
# Bulk lookup
# ============================================

class ParsedName(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    full_name: str


class LookupResult(BaseModel):
    full_name: str
    matched_name: Optional[str] = None
    person_id: Optional[str] = None
    phone_numbers: List[str] = Field(default_factory=list)
    email: Optional[str] = None
    status: LookupStatus
    source: Optional[DataSource] = None


# ============================================
# API bodies shared by both providers
# ============================================

class EnrichRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_ids: Optional[List[Union[str, int, None]]] = Field(default=None, alias="personIds")

    def ids(self) -> List[str]:
        return ["" if pid is None else str(pid) for pid in self.person_ids or []]


def enrich_response(requested: int, people: List[EnrichedPerson]) -> Dict[str, Any]:
    """Enrich endpoint payload: only people with phone numbers are returned."""
    with_phones = [p for p in people if p.phone_numbers]
    return {
        "enrichedPeople": [p.model_dump() for p in with_phones],
        "totalRequested": requested,
        "totalWithPhones": len(with_phones),
    }
