"""
Name Matcher - decide whether a search hit plausibly is the person we asked for.

Token heuristic, not a score: the first and last query tokens must both appear
somewhere in the candidate name (plain substring, case-insensitive). A
one-token query only needs that token. Substring hits on unrelated words are
accepted in exchange for recall.
"""

from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def is_plausible_match(query_name: str, candidate_name: Optional[str]) -> bool:
    tokens = (query_name or "").lower().split()
    candidate = (candidate_name or "").lower()

    if not tokens:
        return False

    if len(tokens) < 2:
        return tokens[0] in candidate

    first_name = tokens[0]
    last_name = tokens[-1]
    return first_name in candidate and last_name in candidate


def find_first_match(
    query_name: str,
    candidates: Iterable[T],
    name_of: Callable[[T], Optional[str]],
) -> Optional[T]:
    """Return the first candidate whose name matches, scanning in order."""
    for candidate in candidates:
        if is_plausible_match(query_name, name_of(candidate)):
            return candidate
    return None
