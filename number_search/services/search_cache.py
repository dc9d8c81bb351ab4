"""
Pagination cache for the search page.

Holds pages for one (source, filter set) at a time so paging back does not
hit the vendor again. Storing a page under a new key drops every page cached
for the old one. Advisory only: a miss just means another search call.
"""

import logging
from typing import Dict, Optional, Protocol

from ..models import SearchFilters, SearchResponse, filters_key

logger = logging.getLogger(__name__)


class SearchProvider(Protocol):
    source: str

    async def search(self, filters: SearchFilters, page: int = 1, page_size: int = 10) -> SearchResponse:
        ...


class PageCache:
    def __init__(self):
        self._key: Optional[str] = None
        self._pages: Dict[int, SearchResponse] = {}

    @property
    def current_key(self) -> Optional[str]:
        return self._key

    def get(self, source: str, filters: SearchFilters, page: int) -> Optional[SearchResponse]:
        if filters_key(source, filters) != self._key:
            return None
        return self._pages.get(page)

    def put(self, source: str, filters: SearchFilters, page: int, response: SearchResponse) -> None:
        key = filters_key(source, filters)
        if key != self._key:
            logger.debug("[Search Cache] Filters changed, dropping %d page(s)", len(self._pages))
            self._key = key
            self._pages = {}
        self._pages[page] = response

    def invalidate(self) -> None:
        self._key = None
        self._pages = {}

    def __len__(self) -> int:
        return len(self._pages)


async def cached_search(
    cache: PageCache,
    client: SearchProvider,
    filters: SearchFilters,
    page: int,
    page_size: int,
    new_search: bool = False,
) -> SearchResponse:
    """
    Serve a search page from the cache when possible, else from the provider.

    A new search clears the cache first. Pages are only reused when the page
    size also matches.
    """
    if new_search:
        cache.invalidate()
    else:
        cached = cache.get(client.source, filters, page)
        if cached is not None and cached.page_size == page_size:
            logger.debug("[Search Cache] Hit for %s page %d", client.source, page)
            return cached

    response = await client.search(filters, page=page, page_size=page_size)
    cache.put(client.source, filters, page, response)
    return response
