"""Shared dependencies and serialization helpers for API routers."""
from __future__ import annotations

import threading
from functools import lru_cache

from fastapi import Request

from ..config import Settings, load_settings
from ..contacts import Contact
from ..manager import ContactManager, ContactView

_manager_lock = threading.Lock()


@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return load_settings()


def get_manager(request: Request) -> ContactManager:
    """Return the session manager attached to the running app."""
    manager = getattr(request.app.state, "manager", None)
    if manager is not None:
        return manager
    with _manager_lock:
        manager = getattr(request.app.state, "manager", None)
        if manager is None:
            manager = ContactManager.from_settings(get_settings())
            request.app.state.manager = manager
    return manager


# =============================================================================
# Serialization Helpers
# =============================================================================

def serialize_contact(contact: Contact) -> dict:
    return contact.to_dict()


def serialize_view(current: ContactView) -> dict:
    criteria = current.criteria
    return {
        "contacts": [serialize_contact(c) for c in current.contacts],
        "count": current.count,
        "filters": {
            "search": criteria.search,
            "tag": criteria.tag,
            "recent": criteria.recent,
            "sortBy": criteria.sort_by,
        },
        "theme": current.theme,
        "canUndo": current.can_undo,
        "canRedo": current.can_redo,
    }
