"""
Leads Router - confirm selected search results as leads

Endpoints:
- POST /api/leads/confirm - Enrich a selection, keep people with phone
  numbers, drop ones already listed, save the rest as contacts
- POST /api/leads/export - Download a lead list as CSV
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from ..config import ConfigurationError
from ..models import Lead, PersonSearchResult
from ..services.db.supabase_client import ContactsStore
from ..services.enrichment import EnrichingProvider, enrich_selection
from ..services.export import export_filename, leads_csv
from ..services.leads import NO_PHONE_NUMBERS_MESSAGE, describe_filters, leads_to_contacts, reconcile
from .deps import get_contacts_store, get_enrichers, http_error

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class ConfirmRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected: List[PersonSearchResult] = []
    existing_leads: List[Lead] = Field(default_factory=list, alias="existingLeads")
    search_query: Optional[str] = Field(default=None, alias="searchQuery")
    # Raw filters of the active search; used when searchQuery is not given
    filters: Optional[Dict[str, Any]] = None


class LeadExportRequest(BaseModel):
    leads: List[Lead] = []


# ============================================
# Endpoints
# ============================================

@router.post("/confirm")
async def confirm_leads(
    request: ConfirmRequest,
    enrichers: Dict[str, Callable[[], EnrichingProvider]] = Depends(get_enrichers),
    store: ContactsStore = Depends(get_contacts_store),
):
    """
    Turn selected search results into leads.

    Nothing is saved unless enrichment succeeds. A selection where nobody has
    a phone number is a normal outcome (status=no_phone_numbers), not an error.
    """
    if not request.selected:
        raise HTTPException(status_code=400, detail="selected array is required")

    try:
        sources = {r.person.source for r in request.selected}
        providers = {source: factory() for source, factory in enrichers.items() if source in sources}

        enriched = await enrich_selection(request.selected, providers)
        result = reconcile(enriched, request.existing_leads, request.selected)

        if result.is_empty:
            return {
                "status": "no_phone_numbers",
                "message": NO_PHONE_NUMBERS_MESSAGE,
                "newLeads": [],
                "skippedNoPhone": result.skipped_no_phone,
                "savedCount": 0,
            }
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Lead enrichment")

    response: Dict[str, Any] = {
        "status": "added",
        "message": f"Added {len(result.new_leads)} leads with phone numbers to the list.",
        "newLeads": result.new_leads,
        "skippedNoPhone": result.skipped_no_phone,
        "savedCount": 0,
    }

    # Leads stay usable even if the contacts table is unreachable
    search_query = request.search_query or describe_filters(request.filters)
    try:
        saved = store.save(leads_to_contacts(result.new_leads, search_query))
        response["savedCount"] = len(saved)
    except (ConfigurationError, httpx.HTTPError) as e:
        logger.warning("[Leads] Could not save contacts: %s", e)
        response["saveError"] = str(e)

    return response


@router.post("/export")
async def export_leads(request: LeadExportRequest):
    filename = export_filename("leads")
    return Response(
        content=leads_csv(request.leads),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
