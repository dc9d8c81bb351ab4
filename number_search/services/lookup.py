"""
Bulk Name Lookup - find phone numbers for a pasted or uploaded list of names.

Handles:
- Parsing newline-delimited name lists (CSV or space separated)
- Per-name search -> match -> enrich for Forager and Aviato
- Batched execution (3 names at a time) that always returns one result per
  input name, in input order
"""

import asyncio
import logging
import re
from typing import Awaitable, Callable, List, Optional, Sequence

from ..config import LOOKUP_BATCH_SIZE
from ..models import DataSource, LookupResult, ParsedName
from .concurrency import run_in_batches
from .matching.name_matcher import find_first_match
from .providers.aviato import AviatoClient
from .providers.base import optional_facet, sanitize_search_string
from .providers.forager import ForagerClient

logger = logging.getLogger(__name__)

NameLookup = Callable[[str], Awaitable[LookupResult]]

# Header rows to skip when parsing uploads
HEADER_KEYWORDS = [
    "first_name", "last_name", "firstname", "lastname",
    "first name", "last name", "name", "full_name", "fullname",
]

_EDGE_QUOTES = re.compile(r"^[\"']|[\"']$")


# ============================================================================
# INPUT PARSING
# ============================================================================

def _split_line(line: str) -> List[str]:
    if "," in line:
        # firstName,lastName
        parts = [_EDGE_QUOTES.sub("", p.strip()) for p in line.split(",")]
        if len(parts) >= 2:
            return [parts[0], parts[1]]
        return ["", ""]

    parts = line.split()
    if len(parts) >= 2:
        return [parts[0], " ".join(parts[1:])]
    if len(parts) == 1:
        return [parts[0], ""]
    return ["", ""]


def parse_names(text: str) -> List[ParsedName]:
    """
    Parse a newline-delimited list of names.

    Comma lines take the first two fields as first/last name; other lines take
    the first token as first name and the rest as last name. Lines containing
    a header keyword and lines with no usable name are skipped.
    """
    names: List[ParsedName] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        lowered = line.lower()
        if any(keyword in lowered for keyword in HEADER_KEYWORDS):
            continue

        first_name, last_name = _split_line(line)
        if not first_name and not last_name:
            continue

        names.append(ParsedName(
            id=f"name-{len(names)}",
            first_name=first_name,
            last_name=last_name,
            full_name=f"{first_name} {last_name}".strip(),
        ))
    return names


# ============================================================================
# PER-NAME LOOKUPS
# ============================================================================

def _error_result(full_name: str, source: Optional[DataSource]) -> LookupResult:
    return LookupResult(full_name=full_name, phone_numbers=[], status="error", source=source)


async def lookup_forager_name(client: ForagerClient, full_name: str) -> LookupResult:
    """
    Best-effort Forager lookup: search headlines for the name, keep the first
    result whose name plausibly matches, then pull detail and phone numbers.
    """
    try:
        items = await client.search_raw({
            "person_headline": sanitize_search_string(full_name),
            "page": 1,
        })
        if not items:
            return LookupResult(full_name=full_name, status="not_found", source="forager")

        match = find_first_match(full_name, items, lambda r: (r.get("person") or {}).get("full_name"))
        if not match:
            return LookupResult(full_name=full_name, status="not_found", source="forager")

        person = match["person"]
        person_id = int(person["id"])
        detail, phones = await asyncio.gather(
            client.lookup_person_detail(person_id),
            optional_facet("Forager phone", client.lookup_phone_numbers(person_id)),
        )
        detail = detail or {}
        phone_numbers = [p.phone_number for p in phones if p.phone_number]
        email = (detail.get("work_emails") or [None])[0] or (detail.get("personal_emails") or [None])[0]

        return LookupResult(
            full_name=full_name,
            matched_name=person.get("full_name"),
            person_id=str(person_id),
            phone_numbers=phone_numbers,
            email=email or None,
            status="found" if phone_numbers else "not_found",
            source="forager",
        )
    except Exception as e:
        logger.error("[Lookup] Forager lookup failed for %r: %s", full_name, e)
        return _error_result(full_name, "forager")


async def lookup_aviato_name(client: AviatoClient, full_name: str) -> LookupResult:
    """Aviato lookup: trust the top search hit for the name, then enrich it."""
    try:
        items = await client.search_by_name(full_name, per_page=1)
        if not items:
            return LookupResult(full_name=full_name, status="not_found", source="aviato")

        top = items[0]
        person_id = str(top.get("id"))
        enriched = await client.enrich(person_id)
        if not enriched:
            return LookupResult(
                full_name=full_name,
                matched_name=top.get("fullName"),
                person_id=person_id,
                status="not_found",
                source="aviato",
            )

        phone_numbers = [p.phone_number for p in enriched.phone_numbers if p.phone_number]
        return LookupResult(
            full_name=full_name,
            matched_name=enriched.full_name or top.get("fullName"),
            person_id=person_id,
            phone_numbers=phone_numbers,
            email=enriched.primary_email() or None,
            status="found" if phone_numbers else "not_found",
            source="aviato",
        )
    except Exception as e:
        logger.error("[Lookup] Aviato lookup failed for %r: %s", full_name, e)
        return _error_result(full_name, "aviato")


# ============================================================================
# PIPELINE
# ============================================================================

async def lookup_names(
    names: Sequence[str],
    lookup_one: NameLookup,
    *,
    source: Optional[DataSource] = None,
    batch_size: int = LOOKUP_BATCH_SIZE,
) -> List[LookupResult]:
    """
    Look up every name and return exactly one result per input, in order.

    Args:
        names: Full names as entered
        lookup_one: Per-name lookup coroutine
        source: Provider tag for error placeholders
        batch_size: Names looked up concurrently

    Returns:
        List aligned with `names`; a lookup that raised becomes an error row
        carrying the original input name
    """
    # Index -> name captured before dispatch
    by_index = list(names)
    logger.info("[Lookup] Looking up %d name(s) via %s", len(by_index), source or "provider")

    outcomes = await run_in_batches(by_index, lookup_one, batch_size, label="Lookup")

    results: List[LookupResult] = []
    for index, outcome in enumerate(outcomes):
        if outcome.ok and isinstance(outcome.value, LookupResult):
            results.append(outcome.value)
        else:
            logger.warning("[Lookup] %r failed: %s", by_index[index], outcome.error)
            results.append(_error_result(by_index[index], source))

    found = sum(1 for r in results if r.status == "found")
    logger.info("[Lookup] Found phone numbers for %d of %d", found, len(results))
    return results
