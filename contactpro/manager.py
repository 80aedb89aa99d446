"""Session controller tying the store, view criteria and persistence together.

A ``ContactManager`` is created once per session (CLI invocation, shell run,
API process) and handed to whichever interface drives it. Interfaces either
call its methods directly or send an ``Intent`` through ``dispatch``.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .config import Settings, load_settings
from .contacts import Contact, ContactStore, FilterCriteria, HistoryManager, view
from .errors import ImportInProgressError, NotFoundError, ParseError
from .storage import BackupSnapshot, PersistenceGateway, build_store
from .storage.backends import KeyValueStore
from .transfer import (
    ExportFormat,
    ImportResult,
    detect_format,
    export_contacts,
    export_filename,
    import_contacts,
    resolve_format,
)

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    """User actions an interface can send to the manager."""

    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    DELETE_SELECTED = "delete_selected"
    SET_FILTER = "set_filter"
    SET_SORT = "set_sort"
    TOGGLE_THEME = "toggle_theme"
    EXPORT = "export"
    IMPORT = "import"
    BACKUP = "backup"
    RESTORE = "restore"
    UNDO = "undo"
    REDO = "redo"


@dataclass
class ContactView:
    """Everything an interface needs to repaint."""
    contacts: List[Contact]
    count: int
    criteria: FilterCriteria
    theme: str
    can_undo: bool
    can_redo: bool


class ContactManager:
    """Explicit per-session context for all contact operations."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        history_limit: Optional[int] = None,
    ) -> None:
        self.gateway = gateway
        self.store = ContactStore(gateway=gateway, history=HistoryManager(limit=history_limit))
        self.criteria = FilterCriteria()
        self.theme = gateway.load_theme()
        self._lock = threading.RLock()
        self._import_guard = threading.Lock()
        self._handlers: Dict[Intent, Callable[..., Any]] = {
            Intent.ADD: self.add_contact,
            Intent.EDIT: self.edit_contact,
            Intent.DELETE: self.delete_contact,
            Intent.DELETE_SELECTED: self.delete_selected,
            Intent.SET_FILTER: self.set_filter,
            Intent.SET_SORT: self.set_sort,
            Intent.TOGGLE_THEME: self.toggle_theme,
            Intent.EXPORT: self.export,
            Intent.IMPORT: self.import_text,
            Intent.BACKUP: self.backup,
            Intent.RESTORE: self.restore,
            Intent.UNDO: self.undo,
            Intent.REDO: self.redo,
        }

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> ContactManager:
        settings = settings or load_settings()
        return cls.from_store(build_store(settings), history_limit=settings.history_limit)

    @classmethod
    def from_store(cls, store: KeyValueStore, *, history_limit: Optional[int] = None) -> ContactManager:
        return cls(PersistenceGateway(store), history_limit=history_limit)

    def dispatch(self, intent: Union[Intent, str], **payload: Any) -> Any:
        """Run the operation bound to ``intent`` with keyword ``payload``."""
        handler = self._handlers[Intent(intent)]
        logger.debug("Dispatching %s", Intent(intent).value)
        return handler(**payload)

    # --- View ---

    def current_view(self) -> ContactView:
        with self._lock:
            contacts = view(self.store.contacts, self.criteria)
            return ContactView(
                contacts=contacts,
                count=len(contacts),
                criteria=self.criteria,
                theme=self.theme,
                can_undo=self.store.history.can_undo,
                can_redo=self.store.history.can_redo,
            )

    def get_contact(self, contact_id: str) -> Contact:
        contact = self.store.get(contact_id)
        if contact is None:
            raise NotFoundError(f"Contact {contact_id} not found.")
        return contact

    def tags(self) -> List[str]:
        return self.store.tags()

    def set_filter(self, field: str, value: Any) -> FilterCriteria:
        with self._lock:
            self.criteria = self.criteria.with_filter(field, value)
            return self.criteria

    def set_sort(self, value: Any) -> FilterCriteria:
        with self._lock:
            self.criteria = self.criteria.with_sort(value)
            return self.criteria

    def reset_filters(self) -> FilterCriteria:
        with self._lock:
            self.criteria = FilterCriteria()
            return self.criteria

    # --- Mutations ---

    def add_contact(self, **fields: Any) -> Contact:
        with self._lock:
            return self.store.add(fields)

    def edit_contact(self, contact_id: str, **fields: Any) -> Contact:
        with self._lock:
            return self.store.update(contact_id, fields)

    def delete_contact(self, contact_id: str) -> int:
        with self._lock:
            return self.store.remove(contact_id)

    def delete_selected(self, contact_ids: Iterable[str]) -> int:
        with self._lock:
            return self.store.remove_many(contact_ids)

    def undo(self) -> bool:
        with self._lock:
            return self.store.undo()

    def redo(self) -> bool:
        with self._lock:
            return self.store.redo()

    # --- Import / export ---

    def export(self, format: Union[str, ExportFormat] = ExportFormat.CSV) -> str:
        with self._lock:
            return export_contacts(self.store.contacts, format)

    def export_to_file(
        self,
        path: Union[str, Path],
        format: Union[str, ExportFormat, None] = None,
    ) -> Path:
        """Write an export; a directory target gets the default file name."""
        target = Path(path)
        fmt = resolve_format(format) if format is not None else None
        if target.is_dir():
            target = target / export_filename(fmt or ExportFormat.CSV)
        if fmt is None:
            fmt = detect_format(target)
        target.write_text(self.export(fmt), encoding="utf-8")
        return target

    def import_text(self, text: str, format: Union[str, ExportFormat]) -> ImportResult:
        """Replace the contact list with the parsed payload.

        Raises:
            ImportInProgressError: if another import has not finished.
            ParseError: if the payload is malformed; nothing changes.
        """
        if not self._import_guard.acquire(blocking=False):
            raise ImportInProgressError("An import is already in progress.")
        try:
            result = import_contacts(text, format)
            with self._lock:
                self.store.replace_all(result.contacts)
            logger.info(
                "Imported %d contact(s) with %d warning(s)",
                len(result.contacts),
                len(result.warnings),
            )
            return result
        finally:
            self._import_guard.release()

    def import_file(self, path: Union[str, Path]) -> ImportResult:
        path = Path(path)
        fmt = detect_format(path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Cannot read {path}: {exc}") from exc
        return self.import_text(text, fmt)

    # --- Backup / restore ---

    def backup(self) -> BackupSnapshot:
        with self._lock:
            return self.gateway.save_backup(self.store.contacts)

    def restore(self) -> BackupSnapshot:
        """Replace the contact list with the saved backup.

        Raises:
            NotFoundError: if no backup has been made.
        """
        with self._lock:
            backup = self.gateway.load_backup()
            if backup is None:
                raise NotFoundError("No backup found!")
            self.store.replace_all(backup.contacts)
            return backup

    # --- Theme ---

    def toggle_theme(self) -> str:
        with self._lock:
            self.theme = "light" if self.theme == "dark" else "dark"
            self.gateway.save_theme(self.theme)
            return self.theme
