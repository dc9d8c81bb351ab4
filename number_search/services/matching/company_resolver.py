"""
Company Resolver - turn an industry keyword into an employer filter.

Aviato's people search cannot filter by company industry directly, so an
industry search runs in two steps:
1. Search companies by the industry keyword
2. Feed the matched companies' LinkedIn slugs into the people filter

The company list is also handed back so callers can show what matched.
"""

import logging
from typing import Awaitable, Callable, List, Tuple

from ...models import AviatoSearchFilters, CompanyMatch

logger = logging.getLogger(__name__)

CompanySearch = Callable[[str], Awaitable[List[CompanyMatch]]]


def _company_ids(matches: List[CompanyMatch]) -> List[str]:
    ids = []
    for match in matches:
        value = (match.linkedin_slug or match.id or "").strip()
        if value and value not in ids:
            ids.append(value)
    return ids


async def resolve_industry_to_people_filters(
    filters: AviatoSearchFilters,
    company_search: CompanySearch,
) -> Tuple[AviatoSearchFilters, List[CompanyMatch]]:
    """
    Rewrite an Aviato filter set that carries a company industry.

    Args:
        filters: Incoming people-search filters
        company_search: Coroutine returning companies for an industry keyword

    Returns:
        Tuple of (people-search filters, company matches). Filters without an
        industry come back unchanged with no matches. When no company matches,
        the industry is dropped and the people search runs unconstrained by
        employer.
    """
    industry = (filters.company_industry or "").strip()
    if not industry:
        return filters, []

    matches = await company_search(industry)
    ids = _company_ids(matches)
    logger.info("[Company Resolver] '%s' matched %d companies", industry, len(matches))

    if not ids:
        return filters.model_copy(update={"company_industry": None}), matches

    resolved = filters.model_copy(update={
        "company_industry": None,
        "company_linkedin_ids": ",".join(ids),
    })
    return resolved, matches
