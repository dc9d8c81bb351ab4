"""
Forager Router - people search and enrichment through Forager

Endpoints:
- POST /api/forager/search - Search people by role/company filters
- POST /api/forager/enrich - Enrich person ids with phones and emails
"""

from typing import Callable, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_PAGE_SIZE
from ..models import EnrichRequest, ForagerSearchFilters, SearchResponse, enrich_response
from ..services.search_cache import PageCache, cached_search
from .deps import get_enrichers, get_page_cache, http_error

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class ForagerSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filters: ForagerSearchFilters = Field(default_factory=ForagerSearchFilters)
    page: int = 1
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, alias="pageSize")
    new_search: bool = Field(default=False, alias="newSearch")


# ============================================
# Endpoints
# ============================================

@router.post("/search", response_model=SearchResponse)
async def search_people(
    request: ForagerSearchRequest,
    providers: Dict[str, Callable] = Depends(get_enrichers),
    cache: PageCache = Depends(get_page_cache),
):
    """Search Forager for people in current roles matching the filters."""
    if request.page < 1 or request.page_size < 1:
        raise HTTPException(status_code=400, detail="page and pageSize must be >= 1")

    try:
        client = providers["forager"]()
        return await cached_search(
            cache, client, request.filters, request.page, request.page_size, request.new_search
        )
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Forager search")


@router.post("/enrich")
async def enrich_people(request: EnrichRequest, providers: Dict[str, Callable] = Depends(get_enrichers)):
    """Enrich Forager person ids. Only people with phone numbers come back."""
    person_ids = request.ids()
    if not person_ids:
        raise HTTPException(status_code=400, detail="personIds array is required")

    try:
        client = providers["forager"]()
        people = await client.enrich_many(person_ids)
        return enrich_response(len(person_ids), people)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Forager enrichment")
