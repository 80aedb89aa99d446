"""Filter and sort the contact list into a display view."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Optional, Sequence

from .models import Contact, parse_timestamp

RECENT_WINDOW = timedelta(days=7)
FILTER_FIELDS = ("search", "tag", "recent")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class SortBy(str, Enum):
    """Known sort orders. Any other value leaves the filtered order alone."""

    NAME = "name"
    RECENT = "recent"


@dataclass(frozen=True)
class FilterCriteria:
    """Session-only filter and sort settings."""
    search: str = ""
    tag: str = ""
    recent: bool = False
    sort_by: str = SortBy.NAME.value

    def with_filter(self, field: str, value: Any) -> FilterCriteria:
        """Return a copy with one filter changed."""
        if field not in FILTER_FIELDS:
            raise ValueError(
                f"Unknown filter {field!r}. Use one of: {', '.join(FILTER_FIELDS)}."
            )
        if field == "recent":
            return replace(self, recent=_as_bool(value))
        return replace(self, **{field: "" if value is None else str(value)})

    def with_sort(self, value: Any) -> FilterCriteria:
        if isinstance(value, SortBy):
            value = value.value
        return replace(self, sort_by=str(value))


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _name_key(contact: Contact):
    return (contact.name.casefold(), contact.name)


def _updated_key(contact: Contact) -> datetime:
    return parse_timestamp(contact.updated) or _OLDEST


def view(
    contacts: Sequence[Contact],
    criteria: FilterCriteria,
    now: Optional[datetime] = None,
) -> List[Contact]:
    """Derive the filtered, sorted view without touching ``contacts``."""
    filtered = list(contacts)

    if criteria.search:
        needle = criteria.search.casefold()
        filtered = [
            c for c in filtered
            if needle in c.name.casefold() or needle in c.email.casefold()
        ]

    if criteria.tag:
        filtered = [c for c in filtered if criteria.tag in c.tags]

    if criteria.recent:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - RECENT_WINDOW
        filtered = [
            c for c in filtered
            if (parse_timestamp(c.created) or _OLDEST) > cutoff
        ]

    if criteria.sort_by == SortBy.NAME.value:
        filtered.sort(key=_name_key)
    elif criteria.sort_by == SortBy.RECENT.value:
        filtered.sort(key=_updated_key, reverse=True)
    return filtered
