"""
Supabase REST client - uses httpx directly against PostgREST.

Only what the contacts table needs: select with in/eq filters, ordering,
limits and upsert. The shared client is created on first use so the app
imports without Supabase credentials.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from ...config import CONTACTS_TABLE, SUPABASE_KEY, SUPABASE_URL, ConfigurationError
from ...models import ContactRecord

logger = logging.getLogger(__name__)

CONTACT_SOURCES = ["forager", "aviato"]


class SupabaseTable:
    """Simple table query builder."""

    def __init__(self, client: "SupabaseClient", table_name: str):
        self.client = client
        self.table_name = table_name
        self._select_columns = "*"
        self._filters: List[str] = []
        self._order_by: Optional[str] = None
        self._order_desc = False
        self._limit: Optional[int] = None
        self._operation = "select"
        self._upsert_data: Union[Dict[str, Any], List[Dict[str, Any]], None] = None
        self._upsert_conflict: Optional[str] = None

    def select(self, columns: str = "*") -> "SupabaseTable":
        self._select_columns = columns
        return self

    def in_(self, column: str, values: List[Any]) -> "SupabaseTable":
        """Filter where column value is in the given list."""
        values_str = ",".join(str(v) for v in values)
        self._filters.append(f"{column}=in.({values_str})")
        return self

    def order(self, column: str, desc: bool = False) -> "SupabaseTable":
        self._order_by = column
        self._order_desc = desc
        return self

    def limit(self, count: int) -> "SupabaseTable":
        self._limit = count
        return self

    def upsert(
        self,
        data: Union[Dict[str, Any], List[Dict[str, Any]]],
        on_conflict: Optional[str] = None,
    ) -> "SupabaseTable":
        self._upsert_data = data
        self._upsert_conflict = on_conflict
        self._operation = "upsert"
        return self

    def _build_url(self) -> str:
        url = f"{self.client.rest_url}/{self.table_name}"
        params = [f"select={self._select_columns}"]
        params.extend(self._filters)

        if self._order_by:
            direction = ".desc" if self._order_desc else ".asc"
            params.append(f"order={self._order_by}{direction}")

        if self._limit:
            params.append(f"limit={self._limit}")

        return f"{url}?{'&'.join(params)}"

    def execute(self) -> "SupabaseResponse":
        url = f"{self.client.rest_url}/{self.table_name}"

        # UPSERT operation
        if self._operation == "upsert":
            headers = {"Prefer": "resolution=merge-duplicates,return=representation"}
            if self._upsert_conflict:
                url = f"{url}?on_conflict={self._upsert_conflict}"
            response = self.client._request("POST", url, json=self._upsert_data, extra_headers=headers)
            return SupabaseResponse(response)

        # SELECT operation (default)
        response = self.client._request("GET", self._build_url())
        return SupabaseResponse(response)


class SupabaseResponse:
    """Response wrapper."""

    def __init__(self, response: httpx.Response):
        self.status_code = response.status_code
        try:
            self.data = response.json() if response.text else []
        except ValueError:
            self.data = []

        # Ensure data is always a list for consistency
        if isinstance(self.data, dict):
            self.data = [self.data]


class SupabaseClient:
    """Simple Supabase REST client."""

    def __init__(self, url: str, key: str, transport: Optional[httpx.BaseTransport] = None):
        self.url = url.rstrip("/")
        self.key = key
        self.rest_url = f"{self.url}/rest/v1"
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        self._client = httpx.Client(timeout=30.0, transport=transport)

    def _request(
        self,
        method: str,
        url: str,
        json: Any = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        headers = {**self.headers}
        if extra_headers:
            headers.update(extra_headers)

        response = self._client.request(method, url, json=json, headers=headers)
        if response.status_code >= 400:
            logger.error("[Supabase Error] %s %s", method, url)
            logger.error("[Supabase Error] Status: %s", response.status_code)
            logger.error("[Supabase Error] Response: %s", response.text[:500])
        response.raise_for_status()
        return response

    def table(self, table_name: str) -> SupabaseTable:
        return SupabaseTable(self, table_name)

    def close(self) -> None:
        self._client.close()


_supabase: Optional[SupabaseClient] = None


def get_supabase() -> SupabaseClient:
    """Shared client, created on first use."""
    global _supabase
    if _supabase is None:
        if not SUPABASE_URL or not SUPABASE_KEY:
            raise ConfigurationError("Missing SUPABASE_URL or SUPABASE_KEY environment variables")
        _supabase = SupabaseClient(SUPABASE_URL, SUPABASE_KEY)
    return _supabase


def close_supabase() -> None:
    """Close the shared client. The next get_supabase() opens a new one."""
    global _supabase
    if _supabase is not None:
        _supabase.close()
        _supabase = None


def test_connection() -> bool:
    """Test if Supabase connection works."""
    try:
        get_supabase().table(CONTACTS_TABLE).select("phone_number").limit(1).execute()
        return True
    except (ConfigurationError, httpx.HTTPError) as e:
        logger.warning("[Supabase] Connection test failed: %s", e)
        return False


# ============================================================================
# CONTACTS
# ============================================================================

class ContactsStore:
    """Phone-number keyed contact storage. Later writes for a number win."""

    def __init__(self, client: Optional[SupabaseClient] = None, table_name: str = CONTACTS_TABLE):
        self._client = client
        self.table_name = table_name

    @property
    def client(self) -> SupabaseClient:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def save(self, contacts: List[ContactRecord]) -> List[Dict[str, Any]]:
        """
        Upsert contacts on phone_number.

        Duplicate numbers inside one call collapse to the last record, since
        PostgREST rejects a batch that touches the same row twice.

        Returns:
            Rows as stored
        """
        by_phone: Dict[str, ContactRecord] = {}
        for contact in contacts:
            by_phone.pop(contact.phone_number, None)
            by_phone[contact.phone_number] = contact

        if not by_phone:
            return []

        payload = [c.model_dump(exclude_none=True) for c in by_phone.values()]
        result = self.client.table(self.table_name).upsert(payload, on_conflict="phone_number").execute()
        logger.info("[Supabase] Saved %d contact(s)", len(result.data))
        return result.data

    def list_recent(self) -> List[Dict[str, Any]]:
        """Contacts from the search providers, newest first."""
        result = (
            self.client.table(self.table_name)
            .select("*")
            .in_("source", CONTACT_SOURCES)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data
