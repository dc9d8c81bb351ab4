"""
Shared router dependencies.

Provider clients, the contacts store and the page cache are process-wide and
created on first request. Tests swap them out through app.dependency_overrides.
"""

import logging
from typing import Callable, Dict, Optional

from fastapi import HTTPException

from ..config import ConfigurationError
from ..services.db.supabase_client import ContactsStore, close_supabase
from ..services.enrichment import EnrichingProvider
from ..services.providers.aviato import AviatoClient
from ..services.providers.base import ProviderError
from ..services.providers.forager import ForagerClient
from ..services.search_cache import PageCache

logger = logging.getLogger(__name__)

_forager: Optional[ForagerClient] = None
_aviato: Optional[AviatoClient] = None
_contacts: Optional[ContactsStore] = None
_page_cache = PageCache()


def get_forager() -> ForagerClient:
    global _forager
    if _forager is None:
        _forager = ForagerClient()
    return _forager


def get_aviato() -> AviatoClient:
    global _aviato
    if _aviato is None:
        _aviato = AviatoClient()
    return _aviato


def get_contacts_store() -> ContactsStore:
    global _contacts
    if _contacts is None:
        _contacts = ContactsStore()
    return _contacts


def get_page_cache() -> PageCache:
    return _page_cache


def get_enrichers() -> Dict[str, Callable[[], EnrichingProvider]]:
    """
    Provider factories by source.

    Endpoints call a factory only after validating the request, and a
    selection only builds the clients it needs.
    """
    return {"forager": get_forager, "aviato": get_aviato}


async def close_clients() -> None:
    """Close provider and Supabase connections on shutdown."""
    global _forager, _aviato, _contacts
    if _forager is not None:
        await _forager.aclose()
        _forager = None
    if _aviato is not None:
        await _aviato.aclose()
        _aviato = None
    _contacts = None
    close_supabase()


def http_error(e: Exception, action: str) -> HTTPException:
    """
    Map a failure inside an endpoint to an HTTPException.

    Vendor and network failures are 502; missing configuration and anything
    unexpected are 500 with the error message.
    """
    if isinstance(e, ProviderError):
        logger.error("[API] %s failed: %s", action, e)
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, ConfigurationError):
        logger.error("[API] %s misconfigured: %s", action, e)
        return HTTPException(status_code=500, detail=str(e))
    logger.exception("[API] %s failed", action)
    return HTTPException(status_code=500, detail=str(e) or f"{action} failed")
