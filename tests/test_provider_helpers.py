import asyncio

import httpx
import pytest

from number_search.services.providers.base import (
    ProviderError,
    ProviderHTTP,
    compute_has_more,
    current_role,
    normalize_url,
    optional_facet,
    sanitize_search_string,
    validate_paging,
)


def test_sanitize_strips_query_grammar_and_joins_words():
    assert sanitize_search_string('Health & "Care" (NYC)') == "Health_Care_NYC"
    assert sanitize_search_string("a*b?c:d\\e") == "abcde"
    assert sanitize_search_string("John   Smith") == "John_Smith"


def test_sanitized_text_contains_no_special_characters():
    cleaned = sanitize_search_string('x&|!(){}[]^"~*?:\\ y')
    assert not any(ch in cleaned for ch in '&|!(){}[]^"~*?:\\')
    assert " " not in cleaned


def test_has_more_is_a_page_size_heuristic():
    assert compute_has_more(10, 10) is True
    assert compute_has_more(7, 10) is False
    assert compute_has_more(0, 10) is False


def test_validate_paging_rejects_zero():
    with pytest.raises(ValueError):
        validate_paging(0, 10)
    with pytest.raises(ValueError):
        validate_paging(1, 0)


def test_normalize_url_adds_scheme():
    assert normalize_url("linkedin.com/in/ann") == "https://linkedin.com/in/ann"
    assert normalize_url("http://linkedin.com/in/ann") == "http://linkedin.com/in/ann"
    assert normalize_url(None) == ""


def test_current_role_prefers_open_ended_entry():
    history = [
        {"companyName": "Old Co", "companyID": 1, "endDate": "2020-01", "positionList": [{"title": "Analyst"}]},
        {"companyName": "Acme", "companyID": 2, "positionList": [
            {"title": "Manager", "endDate": "2022-01"},
            {"title": "Director"},
        ]},
    ]
    assert current_role(history) == {"title": "Director", "company_name": "Acme", "company_id": "2"}


def test_current_role_falls_back_to_first_entry():
    history = [
        {"companyName": "First", "endDate": "2021-01", "positionList": []},
        {"companyName": "Second", "endDate": "2019-01"},
    ]
    role = current_role(history)
    assert role["company_name"] == "First"
    assert role["title"] == ""


def test_current_role_empty_history():
    assert current_role([]) is None
    assert current_role(None) is None


def test_optional_facet_swallows_provider_errors_only():
    async def failing():
        raise ProviderError("Aviato", 500, "boom")

    assert asyncio.run(optional_facet("phone", failing())) == []

    async def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        asyncio.run(optional_facet("phone", broken()))


def _http(handler):
    return ProviderHTTP("Forager", "https://api.test", {"X-API-KEY": "k"}, transport=httpx.MockTransport(handler))


def test_provider_http_maps_error_status():
    http = _http(lambda request: httpx.Response(429, text="slow down"))

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(http.request("POST", "/search", json={}))

    assert excinfo.value.status_code == 429
    assert str(excinfo.value) == "Forager API error: 429 - slow down"


def test_provider_http_maps_network_errors():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(_http(handler).request("GET", "/x"))

    assert excinfo.value.status_code is None
    assert "network" in str(excinfo.value)


def test_provider_http_empty_body_is_none():
    http = _http(lambda request: httpx.Response(200, content=b""))
    assert asyncio.run(http.request("GET", "/x")) is None


def test_provider_http_sends_headers():
    seen = {}

    def handler(request):
        seen["key"] = request.headers["X-API-KEY"]
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"ok": True})

    assert asyncio.run(_http(handler).request("GET", "/x", params={"a": "1"})) == {"ok": True}
    assert seen == {"key": "k", "url": "https://api.test/x?a=1"}
