"""In-memory contact list with history snapshots and write-through persistence."""
from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..errors import NotFoundError
from .history import HistoryManager
from .models import Contact, build_contact, clean_fields

if TYPE_CHECKING:
    from ..storage.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContactStore:
    """Owns the canonical contact list for a session.

    Every mutation first pushes a snapshot of the current list onto the
    history, then changes the list, persists it and notifies listeners.
    ``undo``/``redo`` replace the list without pushing a snapshot.
    """

    def __init__(
        self,
        gateway: Optional[PersistenceGateway] = None,
        history: Optional[HistoryManager] = None,
        contacts: Optional[Sequence[Contact]] = None,
    ) -> None:
        self.gateway = gateway
        self.history = history if history is not None else HistoryManager()
        if contacts is None and gateway is not None:
            contacts = gateway.load_contacts()
        self._contacts: List[Contact] = list(contacts or [])
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._contacts)

    @property
    def contacts(self) -> List[Contact]:
        """Copies of the contacts in canonical (insertion) order.

        Records are copied so edits made by callers never bypass the history.
        """
        return copy.deepcopy(self._contacts)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def get(self, contact_id: str) -> Optional[Contact]:
        contact = self._find(contact_id)
        return copy.deepcopy(contact) if contact is not None else None

    def _find(self, contact_id: str) -> Optional[Contact]:
        return next((c for c in self._contacts if c.id == contact_id), None)

    def tags(self) -> List[str]:
        """Distinct tags in first-seen order."""
        seen: Dict[str, None] = {}
        for contact in self._contacts:
            for tag in contact.tags:
                seen.setdefault(tag, None)
        return list(seen)

    # --- Mutations ---

    def add(self, fields: Dict[str, Any]) -> Contact:
        contact = build_contact(fields, existing_ids={c.id for c in self._contacts})
        self.history.snapshot(self._contacts)
        self._contacts.append(contact)
        logger.debug("Added contact %s", contact.id)
        self._commit()
        return copy.deepcopy(contact)

    def update(self, contact_id: str, fields: Dict[str, Any]) -> Contact:
        contact = self._find(contact_id)
        if contact is None:
            raise NotFoundError(f"Contact {contact_id} not found.")
        cleaned = clean_fields(fields, partial=True)
        self.history.snapshot(self._contacts)
        for key, value in cleaned.items():
            setattr(contact, key, value)
        contact.updated = _now()
        logger.debug("Updated contact %s", contact_id)
        self._commit()
        return copy.deepcopy(contact)

    def remove(self, contact_id: str) -> int:
        return self.remove_many([contact_id])

    def remove_many(self, contact_ids: Iterable[str]) -> int:
        targets = set(contact_ids)
        kept = [c for c in self._contacts if c.id not in targets]
        removed = len(self._contacts) - len(kept)
        if not removed:
            return 0
        self.history.snapshot(self._contacts)
        self._contacts = kept
        logger.debug("Removed %d contact(s)", removed)
        self._commit()
        return removed

    def replace_all(self, contacts: Sequence[Contact], *, record_history: bool = True) -> None:
        if record_history:
            self.history.snapshot(self._contacts)
        self._contacts = list(contacts)
        logger.debug("Replaced contact list (%d contacts)", len(self._contacts))
        self._commit()

    def undo(self) -> bool:
        restored = self.history.undo(self._contacts)
        if restored is None:
            return False
        self.replace_all(restored, record_history=False)
        return True

    def redo(self) -> bool:
        restored = self.history.redo()
        if restored is None:
            return False
        self.replace_all(restored, record_history=False)
        return True

    def _commit(self) -> None:
        if self.gateway is not None:
            self.gateway.save_contacts(self._contacts)
        for listener in self._listeners:
            listener()
