"""
Shared plumbing for the people-search provider adapters.

Covers the HTTP client wrapper, error type, query sanitization, the has_more
heuristic and current-role extraction.
"""

import logging
import re
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

import httpx

from ...config import PROVIDER_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Characters with meaning in the vendor's keyword query grammar
_QUERY_SPECIAL_CHARS = re.compile(r'[&|!(){}\[\]^"~*?:\\]')
_WHITESPACE = re.compile(r"\s+")


class ProviderError(Exception):
    """A vendor call failed (non-2xx response or network error)."""

    def __init__(self, provider: str, status_code: Optional[int], message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        status = status_code if status_code is not None else "network"
        super().__init__(f"{provider} API error: {status} - {message}")


def sanitize_search_string(text: str) -> str:
    """Strip query-grammar characters and turn whitespace runs into underscores."""
    cleaned = _QUERY_SPECIAL_CHARS.sub("", text)
    return _WHITESPACE.sub("_", cleaned).strip()


def compute_has_more(returned: int, page_size: int) -> bool:
    """
    Guess whether another page exists.

    Known limitation: when the total is an exact multiple of page_size the
    last full page still reports True.
    """
    return returned == page_size


def validate_paging(page: int, page_size: int) -> None:
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")


def normalize_url(url: Optional[str]) -> str:
    """Ensure a URL carries an http(s) scheme."""
    if not url:
        return ""
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return f"https://{url}"


def current_role(experience_list: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, str]]:
    """
    Pick the ongoing role from a vendor experience history.

    The first entry without an endDate wins; otherwise the first entry as the
    vendor ordered it. The same rule picks the position inside that entry.

    Returns:
        Dict with title, company_name, company_id, or None for empty history
    """
    if not experience_list:
        return None

    current = next((e for e in experience_list if not e.get("endDate")), experience_list[0])
    positions = current.get("positionList") or []
    position = next((p for p in positions if not p.get("endDate")), positions[0] if positions else None)

    return {
        "title": (position or {}).get("title") or "",
        "company_name": current.get("companyName") or "",
        "company_id": str(current.get("companyID") or ""),
    }


async def optional_facet(name: str, fetch: Awaitable[List[T]]) -> List[T]:
    """
    Await an optional enrichment facet (phones, emails).

    A failed facet degrades to an empty list instead of failing the parent
    enrichment.
    """
    try:
        return await fetch
    except ProviderError as e:
        logger.warning("[Facet] %s lookup failed: %s", name, e)
        return []


class ProviderHTTP:
    """Thin async JSON client that maps transport failures to ProviderError."""

    def __init__(
        self,
        provider: str,
        base_url: str,
        headers: Dict[str, str],
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers={"Content-Type": "application/json", **headers},
            timeout=timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.HTTPError as e:
            raise ProviderError(self.provider, None, str(e)) from e

        if response.status_code >= 400:
            logger.error("[%s Error] %s %s -> %s", self.provider, method, endpoint, response.status_code)
            raise ProviderError(self.provider, response.status_code, response.text[:500])

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(self.provider, response.status_code, "invalid JSON response") from e

    async def aclose(self) -> None:
        await self._client.aclose()
