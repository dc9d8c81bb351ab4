"""
Lookup Router - bulk phone lookup for a list of names

Endpoints:
- POST /api/lookup/parse - Parse pasted/uploaded text into names
- POST /api/lookup/forager - Look up names through Forager
- POST /api/lookup/aviato - Look up names through Aviato
- POST /api/lookup/export - Download lookup results as CSV
"""

from functools import partial
from typing import Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from ..models import LookupResult
from ..services.export import export_filename, lookup_results_csv
from ..services.lookup import lookup_aviato_name, lookup_forager_name, lookup_names, parse_names
from .deps import get_enrichers, http_error

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class ParseRequest(BaseModel):
    text: str = ""


class LookupRequest(BaseModel):
    names: Optional[List[str]] = None


class LookupExportRequest(BaseModel):
    results: List[LookupResult] = []


def _require_names(request: LookupRequest) -> List[str]:
    if not request.names:
        raise HTTPException(status_code=400, detail="names array is required")
    return request.names


# ============================================
# Endpoints
# ============================================

@router.post("/parse")
async def parse(request: ParseRequest):
    """Split text into first/last names, skipping header rows."""
    return {"names": parse_names(request.text)}


@router.post("/forager")
async def lookup_forager(request: LookupRequest, providers: Dict[str, Callable] = Depends(get_enrichers)):
    """One result per name, in input order. Per-name failures come back as status=error."""
    names = _require_names(request)
    try:
        client = providers["forager"]()
        results = await lookup_names(names, partial(lookup_forager_name, client), source="forager")
        return {"results": results}
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Forager lookup")


@router.post("/aviato")
async def lookup_aviato(request: LookupRequest, providers: Dict[str, Callable] = Depends(get_enrichers)):
    """One result per name, in input order. Per-name failures come back as status=error."""
    names = _require_names(request)
    try:
        client = providers["aviato"]()
        results = await lookup_names(names, partial(lookup_aviato_name, client), source="aviato")
        return {"results": results}
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "Aviato lookup")


@router.post("/export")
async def export_results(request: LookupExportRequest):
    filename = export_filename("lookup_results")
    return Response(
        content=lookup_results_csv(request.results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
