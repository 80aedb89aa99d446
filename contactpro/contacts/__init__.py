"""Contact records, history, querying and the in-memory store."""
from .history import HistoryManager
from .models import Contact, build_contact, clean_fields, parse_tags
from .query import FilterCriteria, SortBy, view
from .store import ContactStore

__all__ = [
    # Records
    "Contact",
    "build_contact",
    "clean_fields",
    "parse_tags",
    # History
    "HistoryManager",
    # Query
    "FilterCriteria",
    "SortBy",
    "view",
    # Store
    "ContactStore",
]
