# Name matching and company resolution
from .name_matcher import is_plausible_match, find_first_match
from .company_resolver import resolve_industry_to_people_filters

__all__ = [
    "is_plausible_match",
    "find_first_match",
    "resolve_industry_to_people_filters",
]
