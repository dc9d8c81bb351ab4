import asyncio

from number_search.models import AviatoSearchFilters, CompanyMatch
from number_search.services.matching.company_resolver import resolve_industry_to_people_filters


def _search_returning(matches):
    calls = []

    async def company_search(industry):
        calls.append(industry)
        return matches

    return company_search, calls


def test_no_industry_skips_company_search():
    company_search, calls = _search_returning([])
    filters = AviatoSearchFilters(headline="CTO")

    resolved, matches = asyncio.run(resolve_industry_to_people_filters(filters, company_search))

    assert resolved == filters
    assert matches == []
    assert calls == []


def test_matches_become_employer_filter():
    company_search, calls = _search_returning([
        CompanyMatch(id="1", name="Acme", linkedin_slug="acme"),
        CompanyMatch(id="2", name="Beta", linkedin_slug=""),
        CompanyMatch(id="3", name="Acme again", linkedin_slug="acme"),
    ])
    filters = AviatoSearchFilters(headline="CTO", company_industry=" fintech ")

    resolved, matches = asyncio.run(resolve_industry_to_people_filters(filters, company_search))

    assert calls == ["fintech"]
    assert resolved.company_industry is None
    assert resolved.company_linkedin_ids == "acme,2"
    assert resolved.headline == "CTO"
    assert len(matches) == 3


def test_no_matches_drops_industry_and_keeps_other_filters():
    company_search, _ = _search_returning([])
    filters = AviatoSearchFilters(country="US", company_industry="underwater basket weaving")

    resolved, matches = asyncio.run(resolve_industry_to_people_filters(filters, company_search))

    assert resolved.company_industry is None
    assert resolved.company_linkedin_ids is None
    assert resolved.country == "US"
    assert matches == []


def test_input_filters_are_not_mutated():
    company_search, _ = _search_returning([CompanyMatch(id="1", linkedin_slug="acme")])
    filters = AviatoSearchFilters(company_industry="fintech")

    asyncio.run(resolve_industry_to_people_filters(filters, company_search))

    assert filters.company_industry == "fintech"
    assert filters.company_linkedin_ids is None
