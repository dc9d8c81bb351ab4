import asyncio
import json

import httpx
import pytest

from number_search.config import ConfigurationError
from number_search.models import ContactRecord
from number_search.routers import deps
from number_search.services.db import supabase_client
from number_search.services.db.supabase_client import ContactsStore, SupabaseClient


def _store(handler):
    client = SupabaseClient("https://project.supabase.test", "service-key", transport=httpx.MockTransport(handler))
    return ContactsStore(client)


def test_save_upserts_on_phone_number_last_write_wins():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["params"] = dict(request.url.params)
        seen["prefer"] = request.headers["Prefer"]
        seen["apikey"] = request.headers["apikey"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=seen["body"])

    contacts = [
        ContactRecord(phone_number="555-0100", full_name="Old Name", source="forager"),
        ContactRecord(phone_number="555-0200", full_name="Bo Ray", source="aviato"),
        ContactRecord(phone_number="555-0100", full_name="New Name", source="forager"),
    ]

    saved = _store(handler).save(contacts)

    assert seen["method"] == "POST"
    assert seen["params"] == {"on_conflict": "phone_number"}
    assert "resolution=merge-duplicates" in seen["prefer"]
    assert seen["apikey"] == "service-key"
    assert [(c["phone_number"], c["full_name"]) for c in seen["body"]] == [
        ("555-0200", "Bo Ray"),
        ("555-0100", "New Name"),
    ]
    assert len(saved) == 2


def test_save_with_nothing_makes_no_request():
    def handler(request):
        raise AssertionError("no request expected")

    assert _store(handler).save([]) == []


def test_list_recent_filters_sources_newest_first():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{"phone_number": "555-0100", "source": "forager"}])

    rows = _store(handler).list_recent()

    assert seen["method"] == "GET"
    assert seen["path"] == "/rest/v1/contacts"
    assert seen["params"]["source"] == "in.(forager,aviato)"
    assert seen["params"]["order"] == "created_at.desc"
    assert rows == [{"phone_number": "555-0100", "source": "forager"}]


def test_errors_raise_http_status_error():
    store = _store(lambda request: httpx.Response(409, text="conflict"))

    with pytest.raises(httpx.HTTPStatusError):
        store.save([ContactRecord(phone_number="555", source="forager")])


def test_missing_credentials_fail_on_first_use(monkeypatch):
    monkeypatch.setattr(supabase_client, "SUPABASE_URL", None)
    monkeypatch.setattr(supabase_client, "_supabase", None)

    store = ContactsStore()

    with pytest.raises(ConfigurationError):
        store.list_recent()
    assert supabase_client.test_connection() is False


def test_close_clients_closes_shared_supabase_client(monkeypatch):
    shared = SupabaseClient("https://project.supabase.test", "service-key",
                            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])))
    monkeypatch.setattr(supabase_client, "_supabase", shared)
    monkeypatch.setattr(deps, "_contacts", ContactsStore(shared))

    asyncio.run(deps.close_clients())

    assert shared._client.is_closed
    assert supabase_client._supabase is None
    assert deps._contacts is None
