import asyncio
import json

import httpx
import pytest

from number_search.models import ForagerSearchFilters
from number_search.services.providers.base import ProviderError
from number_search.services.providers.forager import ForagerClient, build_search_params, parse_phone_numbers


def _client(handler):
    return ForagerClient(api_key="key", account_id="99", base_url="https://forager.test", transport=httpx.MockTransport(handler))


def _search_item(role_id, person_id, name):
    return {
        "id": role_id,
        "title": "Head of Sales",
        "person": {
            "id": person_id,
            "full_name": name,
            "first_name": name.split()[0],
            "headline": "Sales leader",
            "linkedin_info": {"public_profile_url": f"https://linkedin.com/in/{person_id}"},
        },
        "organization": {"id": 500, "name": "Acme"},
    }


def test_unset_filters_are_not_sent():
    params = build_search_params(ForagerSearchFilters(), page=1)
    assert params == {"role_is_current": True, "page": 1}


def test_filters_map_to_vendor_fields():
    filters = ForagerSearchFilters(
        person_industry="Health & Care",
        person_location="Austin",
        company_industry="fin-tech (B2B)",
        company_location="Texas",
        company_keywords="VP Sales",
    )
    params = build_search_params(filters, page=3)

    assert params["person_headline"] == "Health_Care"
    assert params["person_locations"] == ["Austin"]
    assert params["organization_description"] == "fin-tech_B2B"
    assert params["org_locations"] == ["Texas"]
    assert params["role_title"] == "VP_Sales"
    assert params["page"] == 3


def test_search_normalizes_results():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["key"] = request.headers["X-API-KEY"]
        seen["body"] = json.loads(request.content)
        items = [_search_item(10 + i, 100 + i, f"Person {i}") for i in range(10)]
        return httpx.Response(200, json={"search_results": items, "total_search_results": 42})

    response = asyncio.run(_client(handler).search(ForagerSearchFilters(person_location="Austin"), page=2, page_size=10))

    assert seen["path"] == "/api/99/datastorage/person_role_search/"
    assert seen["key"] == "key"
    assert seen["body"] == {"role_is_current": True, "page": 2, "person_locations": ["Austin"]}

    first = response.results[0]
    assert first.person.id == "10-100-2-0"
    assert first.person.forager_person_id == "100"
    assert first.person.linkedin_url == "https://linkedin.com/in/100"
    assert first.role.title == "Head of Sales"
    assert first.role.company_name == "Acme"
    assert response.total_count == 42
    assert response.has_more is True


def test_short_page_has_no_more():
    def handler(request):
        return httpx.Response(200, json={"search_results": [_search_item(1, 2, "Ann Lee")]})

    response = asyncio.run(_client(handler).search(ForagerSearchFilters(), page=1, page_size=10))

    assert response.has_more is False
    assert response.total_count == 1


def test_search_error_raises_provider_error():
    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(_client(lambda r: httpx.Response(401, text="bad key")).search(ForagerSearchFilters()))
    assert excinfo.value.status_code == 401


def test_parse_phone_numbers_accepts_both_shapes():
    phones = parse_phone_numbers([{"phone_number": "555-1"}, {"number": "555-2", "type": "mobile"}, {"other": 1}])
    assert [(p.phone_number, p.type) for p in phones] == [("555-1", None), ("555-2", "mobile")]
    assert parse_phone_numbers({"unexpected": "dict"}) == []


def _enrich_handler(phone_status=200, detail_status=200):
    def handler(request):
        body = json.loads(request.content)
        if request.url.path.endswith("/person_detail_lookup/"):
            if detail_status != 200:
                return httpx.Response(detail_status, text="nope")
            return httpx.Response(200, json={
                "id": body["person_id"],
                "full_name": "Ann Lee",
                "work_emails": ["ann@acme.com"],
                "personal_emails": ["ann@gmail.com"],
                "location": {"name": "Austin"},
                "current_role": {"title": "CFO", "company_name": "Acme", "company_id": 500},
            })
        if request.url.path.endswith("/person_contacts_lookup/phone_numbers/"):
            if phone_status != 200:
                return httpx.Response(phone_status, text="phone service down")
            return httpx.Response(200, json=[{"phone_number": "555-0100", "type": "mobile"}])
        return httpx.Response(404)

    return handler


def test_enrich_combines_detail_and_phones():
    person = asyncio.run(_client(_enrich_handler()).enrich("77"))

    assert person.id == "77"
    assert person.phone_numbers[0].phone_number == "555-0100"
    assert person.location == "Austin"
    assert person.current_role.title == "CFO"
    assert person.primary_email() == "ann@acme.com"
    assert person.source == "forager"


def test_failed_phone_lookup_only_empties_phones():
    person = asyncio.run(_client(_enrich_handler(phone_status=500)).enrich("77"))

    assert person is not None
    assert person.phone_numbers == []
    assert person.full_name == "Ann Lee"


def test_failed_detail_lookup_is_not_found():
    assert asyncio.run(_client(_enrich_handler(detail_status=404)).enrich("77")) is None


def test_enrich_many_skips_non_numeric_ids():
    calls = []

    def handler(request):
        calls.append(json.loads(request.content)["person_id"])
        return _enrich_handler()(request)

    people = asyncio.run(_client(handler).enrich_many(["", "undefined", "abc", "42"]))

    assert [p.id for p in people] == ["42"]
    assert set(calls) == {42}
