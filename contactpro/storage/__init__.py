"""Persistence for the contact list, backup snapshot and theme."""
from .backends import (
    FileKeyValueStore,
    FirestoreKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    build_store,
)
from .gateway import (
    BACKUP_KEY,
    CONTACTS_KEY,
    THEME_KEY,
    BackupSnapshot,
    PersistenceGateway,
)

__all__ = [
    # Backends
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "FirestoreKeyValueStore",
    "build_store",
    # Gateway
    "PersistenceGateway",
    "BackupSnapshot",
    "CONTACTS_KEY",
    "BACKUP_KEY",
    "THEME_KEY",
]
