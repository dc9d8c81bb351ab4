"""
Contacts Router - saved contacts in Supabase

Endpoints:
- POST /api/contacts - Upsert contacts keyed by phone number
- GET /api/contacts - List Forager/Aviato contacts, newest first
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..models import ContactRecord
from ..services.db.supabase_client import ContactsStore
from .deps import get_contacts_store

router = APIRouter()


class ContactsRequest(BaseModel):
    contacts: Optional[List[ContactRecord]] = None


@router.post("")
async def save_contacts(request: ContactsRequest, store: ContactsStore = Depends(get_contacts_store)):
    """Save contacts; a repeated phone number overwrites the earlier row."""
    if not request.contacts:
        raise HTTPException(status_code=400, detail="contacts array is required")

    try:
        saved = store.save(request.contacts)
        return {"success": True, "savedCount": len(saved), "contacts": saved}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to save contacts: {e}")


@router.get("")
async def list_contacts(store: ContactsStore = Depends(get_contacts_store)):
    try:
        return {"contacts": store.list_recent()}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch contacts: {e}")
