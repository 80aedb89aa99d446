"""Key-value backends: local files, Firestore with file fallback, memory."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from ..config import Settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_firestore_client() -> Any:
    """Return the shared Firestore client, initializing firebase-admin once."""
    try:
        import firebase_admin
        from firebase_admin import firestore
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "firebase-admin is required for the Firestore storage backend. "
            "Install it or set CPX_STORAGE_BACKEND=file."
        ) from exc

    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app()
    return firestore.client()


class KeyValueStore(Protocol):
    """Minimal persistence surface: whole text values under string keys."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore:
    """One file per key inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self.directory / safe_key

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)


class FirestoreKeyValueStore:
    """One Firestore document per key, falling back to files on failure."""

    def __init__(
        self,
        collection: str,
        fallback: FileKeyValueStore,
        client: Any = None,
    ) -> None:
        self.collection = collection
        self.fallback = fallback
        self._client = client

    def _db(self) -> Any:
        if self._client is None:
            self._client = get_firestore_client()
        return self._client

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self._db().collection(self.collection).document(key).get()
        except Exception as exc:  # pragma: no cover - network/auth path
            logger.warning("Firestore read of %r failed, falling back to local: %s", key, exc)
            return self.fallback.get(key)
        if not doc.exists:
            return None
        return (doc.to_dict() or {}).get("value")

    def set(self, key: str, value: str) -> None:
        payload = {
            "value": value,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._db().collection(self.collection).document(key).set(payload)
        except Exception as exc:  # pragma: no cover - network/auth path
            logger.warning("Firestore write of %r failed, falling back to local: %s", key, exc)
            self.fallback.set(key, value)


def build_store(settings: Settings) -> KeyValueStore:
    """Return the backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return MemoryKeyValueStore()
    files = FileKeyValueStore(settings.data_dir)
    if settings.storage_backend == "firestore":
        return FirestoreKeyValueStore(settings.firestore_collection, fallback=files)
    return files
