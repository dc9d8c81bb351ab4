"""
Enrichment Service - turn search-result stubs into full contact profiles.

Handles:
- Filtering out unusable person ids before any network call
- Batched enrichment (5 concurrent calls per batch, batches sequential)
- Enriching a mixed-provider selection from the search page
"""

import asyncio
import logging
import re
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Protocol

from ..config import ENRICH_BATCH_SIZE
from ..models import EnrichedPerson, PersonSearchResult
from .concurrency import run_in_batches, successful_values

logger = logging.getLogger(__name__)

UNDEFINED_SENTINEL = "undefined"


class EnrichingProvider(Protocol):
    source: str

    async def enrich_many(self, person_ids: List[str]) -> List[EnrichedPerson]:
        ...


def _is_integer(value: str) -> bool:
    return re.fullmatch(r"-?\d+", value.strip(), re.ASCII) is not None


def valid_person_ids(person_ids: Iterable[Optional[str]], numeric: bool) -> List[str]:
    """
    Drop ids that cannot be enriched.

    Args:
        person_ids: Raw ids from the caller
        numeric: True for providers whose id space is integers only

    Returns:
        Ids in their original order, minus empty, "undefined" and (for
        numeric providers) non-integer values
    """
    valid = []
    for pid in person_ids:
        if not pid or pid == UNDEFINED_SENTINEL:
            continue
        if numeric and not _is_integer(pid):
            continue
        valid.append(pid)
    return valid


async def enrich_many(
    person_ids: Iterable[Optional[str]],
    enrich_one: Callable[[str], Awaitable[Optional[EnrichedPerson]]],
    *,
    numeric: bool,
    batch_size: int = ENRICH_BATCH_SIZE,
    label: str = "Enrichment",
) -> List[EnrichedPerson]:
    """
    Enrich a list of person ids with bounded concurrency.

    This is a filtering map: failed or not-found ids are dropped, so the
    output can be shorter than the input.

    Returns:
        Enriched people in input order
    """
    ids = valid_person_ids(person_ids, numeric)
    if not ids:
        logger.info("[%s] No valid person IDs to enrich", label)
        return []

    logger.info("[%s] Enriching %d person ID(s) in batches of %d", label, len(ids), batch_size)
    outcomes = await run_in_batches(ids, enrich_one, batch_size, label=label)

    for pid, outcome in zip(ids, outcomes):
        if not outcome.ok:
            logger.warning("[%s] Enrichment failed for %s: %s", label, pid, outcome.error)

    people = successful_values(outcomes)
    logger.info("[%s] Enriched %d of %d", label, len(people), len(ids))
    return people


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


async def enrich_selection(
    selected: List[PersonSearchResult],
    providers: Dict[str, EnrichingProvider],
) -> List[EnrichedPerson]:
    """
    Enrich a selection that may mix Forager and Aviato results.

    Each provider gets its own de-duplicated id list and the providers run
    concurrently. Results are concatenated in provider order.
    """
    jobs = []
    for source, provider in providers.items():
        ids = _unique(r.person.forager_person_id for r in selected if r.person.source == source)
        if ids:
            jobs.append(provider.enrich_many(ids))

    if not jobs:
        return []

    batches = await asyncio.gather(*jobs)
    return [person for batch in batches for person in batch]
