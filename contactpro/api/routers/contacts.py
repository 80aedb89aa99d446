"""Contacts Router - listing, filtering and editing contacts."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...manager import ContactManager, Intent
from ..dependencies import get_manager, serialize_contact, serialize_view
from ..models import BulkDeleteRequest, ContactCreateRequest, ContactUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def list_contacts(
    search: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    recent: Optional[bool] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    manager: ContactManager = Depends(get_manager),
) -> dict:
    """Return the current view. Given query values update the session filters."""
    for field, value in (("search", search), ("tag", tag), ("recent", recent)):
        if value is not None:
            manager.dispatch(Intent.SET_FILTER, field=field, value=value)
    if sort_by is not None:
        manager.dispatch(Intent.SET_SORT, value=sort_by)
    return serialize_view(manager.current_view())


@router.get("/tags")
def list_tags(manager: ContactManager = Depends(get_manager)) -> dict:
    return {"tags": manager.tags()}


@router.get("/{contact_id}")
def get_contact(contact_id: str, manager: ContactManager = Depends(get_manager)) -> dict:
    return serialize_contact(manager.get_contact(contact_id))


@router.post("", status_code=201)
def create_contact(
    request: ContactCreateRequest,
    manager: ContactManager = Depends(get_manager),
) -> dict:
    contact = manager.dispatch(Intent.ADD, **request.model_dump())
    return serialize_contact(contact)


@router.put("/{contact_id}")
def update_contact(
    contact_id: str,
    request: ContactUpdateRequest,
    manager: ContactManager = Depends(get_manager),
) -> dict:
    fields = request.model_dump(exclude_none=True)
    contact = manager.dispatch(Intent.EDIT, contact_id=contact_id, **fields)
    return serialize_contact(contact)


@router.delete("/{contact_id}")
def delete_contact(contact_id: str, manager: ContactManager = Depends(get_manager)) -> dict:
    removed = manager.dispatch(Intent.DELETE, contact_id=contact_id)
    return {"removed": removed, "count": len(manager.store)}


@router.post("/bulk-delete")
def bulk_delete(
    request: BulkDeleteRequest,
    manager: ContactManager = Depends(get_manager),
) -> dict:
    removed = manager.dispatch(Intent.DELETE_SELECTED, contact_ids=request.ids)
    logger.info("Bulk delete removed %d of %d requested", removed, len(request.ids))
    return {"removed": removed, "count": len(manager.store)}
