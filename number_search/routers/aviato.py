"""
Aviato Router - people search and enrichment through Aviato

Endpoints:
- POST /api/aviato/search - Search people; an industry filter is resolved to
  matching companies first and the matches are returned alongside results
- POST /api/aviato/enrich - Enrich person ids with phones and emails
"""

from typing import Callable, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_PAGE_SIZE
from ..models import AviatoSearchFilters, EnrichRequest, SearchResponse, enrich_response
from ..services.search_cache import PageCache, cached_search
from .deps import get_enrichers, get_page_cache, http_error

router = APIRouter()


class AviatoSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filters: AviatoSearchFilters = Field(default_factory=AviatoSearchFilters)
    page: int = 1
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, alias="pageSize")
    new_search: bool = Field(default=False, alias="newSearch")


@router.post("/search", response_model=SearchResponse)
async def search_people(
    request: AviatoSearchRequest,
    providers: Dict[str, Callable] = Depends(get_enrichers),
    cache: PageCache = Depends(get_page_cache),
):
    if request.page < 1 or request.page_size < 1:
        raise HTTPException(status_code=400, detail="page and pageSize must be >= 1")

    try:
        client = providers["aviato"]()
        return await cached_search(
            cache, client, request.filters, request.page, request.page_size, request.new_search
        )
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Aviato search")


@router.post("/enrich")
async def enrich_people(request: EnrichRequest, providers: Dict[str, Callable] = Depends(get_enrichers)):
    person_ids = request.ids()
    if not person_ids:
        raise HTTPException(status_code=400, detail="personIds array is required")

    try:
        client = providers["aviato"]()
        people = await client.enrich_many(person_ids)
        return enrich_response(len(person_ids), people)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Aviato enrichment")
