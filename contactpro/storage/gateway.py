"""Typed access to the persisted contact list, backup snapshot and theme."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..contacts.models import Contact
from ..errors import ParseError
from .backends import KeyValueStore

logger = logging.getLogger(__name__)

CONTACTS_KEY = "contacts"
BACKUP_KEY = "contactsBackup"
THEME_KEY = "theme"

BACKUP_VERSION = "1.0"
THEMES = ("light", "dark")
DEFAULT_THEME = "light"


@dataclass
class BackupSnapshot:
    """The single saved backup of the contact list."""
    version: str = BACKUP_VERSION
    timestamp: str = ""
    contacts: List[Contact] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "contacts": [c.to_dict() for c in self.contacts],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BackupSnapshot:
        return cls(
            version=str(data.get("version", BACKUP_VERSION)),
            timestamp=data.get("timestamp", ""),
            contacts=[Contact.from_dict(item) for item in data.get("contacts") or []],
        )


def _loads(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Stored {what} is not valid JSON: {exc}") from exc


class PersistenceGateway:
    """Reads and writes whole documents through a key-value backend."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_contacts(self) -> List[Contact]:
        text = self.store.get(CONTACTS_KEY)
        if not text:
            return []
        data = _loads(text, "contact list")
        if not isinstance(data, list):
            raise ParseError("Stored contact list is not a JSON array.")
        return [Contact.from_dict(item) for item in data]

    def save_contacts(self, contacts: Sequence[Contact]) -> None:
        self.store.set(CONTACTS_KEY, json.dumps([c.to_dict() for c in contacts]))
        logger.debug("Persisted %d contacts", len(contacts))

    def load_backup(self) -> Optional[BackupSnapshot]:
        text = self.store.get(BACKUP_KEY)
        if not text:
            return None
        data = _loads(text, "backup")
        if not isinstance(data, dict):
            raise ParseError("Stored backup is not a JSON object.")
        return BackupSnapshot.from_dict(data)

    def save_backup(self, contacts: Sequence[Contact]) -> BackupSnapshot:
        backup = BackupSnapshot(
            version=BACKUP_VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
            contacts=list(contacts),
        )
        self.store.set(BACKUP_KEY, json.dumps(backup.to_dict()))
        return backup

    def load_theme(self) -> str:
        theme = self.store.get(THEME_KEY)
        return theme if theme in THEMES else DEFAULT_THEME

    def save_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}.")
        self.store.set(THEME_KEY, theme)
