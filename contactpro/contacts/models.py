"""Contact record and field helpers."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Collection, Dict, List, Optional

from ..errors import ValidationError

CONTACT_FIELDS = ("name", "email", "phone", "address", "tags")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_contact_id(existing: Collection[str] = ()) -> str:
    """Return a fresh id that does not collide with ``existing``."""
    while True:
        candidate = str(uuid.uuid4())
        if candidate not in existing:
            return candidate


def parse_tags(raw: Any) -> List[str]:
    """Normalize tag input.

    A string is split on commas (the way the add/edit form takes tags), a
    sequence is used as-is. Pieces are trimmed and empty ones dropped;
    duplicates and order are kept.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        pieces = raw.split(",")
    else:
        pieces = [str(item) for item in raw]
    return [piece.strip() for piece in pieces if piece.strip()]


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning None when it is unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Contact:
    """A single entry in the contact list."""
    id: str
    name: str
    email: str
    phone: str = ""
    address: str = ""
    tags: List[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "tags": list(self.tags),
            "created": self.created,
            "updated": self.updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Contact:
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            email=data.get("email") or "",
            phone=data.get("phone", "") or "",
            address=data.get("address", "") or "",
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


def clean_fields(fields: Dict[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    """Trim user-supplied contact fields and enforce the required ones.

    Unknown keys are ignored. With ``partial`` only the keys present are
    returned, but a present ``name`` or ``email`` must still be non-empty.

    Raises:
        ValidationError: if ``name`` or ``email`` is missing or blank.
    """
    cleaned: Dict[str, Any] = {}
    for key in CONTACT_FIELDS:
        if key not in fields:
            if partial:
                continue
            cleaned[key] = [] if key == "tags" else ""
            continue
        value = fields[key]
        if key == "tags":
            cleaned[key] = parse_tags(value)
        else:
            cleaned[key] = "" if value is None else str(value).strip()

    missing = [key for key in ("name", "email") if key in cleaned and not cleaned[key]]
    if missing:
        raise ValidationError(
            "Name and Email are required (missing: " + ", ".join(missing) + ")."
        )
    return cleaned


def build_contact(fields: Dict[str, Any], existing_ids: Collection[str] = ()) -> Contact:
    """Create a new contact from form fields with a fresh id and timestamps."""
    cleaned = clean_fields(fields)
    now = _now()
    return Contact(
        id=new_contact_id(existing_ids),
        name=cleaned["name"],
        email=cleaned["email"],
        phone=cleaned["phone"],
        address=cleaned["address"],
        tags=cleaned["tags"],
        created=now,
        updated=now,
    )
