"""
Configuration - environment-backed settings for the number search service.

All env loading is centralized here; service modules import the constants.
Credentials are checked lazily via require() so the app imports without them.
"""

import os

from dotenv import load_dotenv

load_dotenv(".env.local")
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing."""


# ============================================================================
# VENDOR APIS
# ============================================================================

FORAGER_API_URL = os.getenv("FORAGER_API_URL", "https://api-v2.forager.ai")
FORAGER_API_KEY = os.getenv("FORAGER_API_KEY")
FORAGER_ACCOUNT_ID = os.getenv("FORAGER_ACCOUNT_ID")

AVIATO_API_URL = os.getenv("AVIATO_API_URL", "https://data.api.aviato.co")
AVIATO_API_KEY = os.getenv("AVIATO_API_KEY")

# Per-call timeout for vendor requests
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "30"))

# ============================================================================
# SUPABASE
# ============================================================================

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
CONTACTS_TABLE = os.getenv("CONTACTS_TABLE", "contacts")

# ============================================================================
# BATCHING
# ============================================================================

ENRICH_BATCH_SIZE = int(os.getenv("ENRICH_BATCH_SIZE", "5"))   # enrichment calls in flight
LOOKUP_BATCH_SIZE = int(os.getenv("LOOKUP_BATCH_SIZE", "3"))   # name lookups in flight

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
COMPANY_SEARCH_LIMIT = int(os.getenv("COMPANY_SEARCH_LIMIT", "25"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def require(name: str) -> str:
    """Return a module-level setting, raising if it is unset or empty."""
    value = globals().get(name)
    if not value:
        raise ConfigurationError(f"Missing {name} environment variable")
    return value
