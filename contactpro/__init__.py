"""ContactPro: personal contact list with undo/redo, filtering and CSV/JSON transfer."""
from .contacts import Contact, ContactStore, FilterCriteria, HistoryManager, SortBy, view
from .errors import (
    ContactError,
    ImportInProgressError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from .manager import ContactManager, ContactView, Intent

__version__ = "0.1.0"

__all__ = [
    "Contact",
    "ContactStore",
    "ContactManager",
    "ContactView",
    "FilterCriteria",
    "HistoryManager",
    "Intent",
    "SortBy",
    "view",
    # Errors
    "ContactError",
    "ValidationError",
    "ParseError",
    "NotFoundError",
    "ImportInProgressError",
]
