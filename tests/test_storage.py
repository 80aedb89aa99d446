"""Tests for key-value backends and the persistence gateway."""
from __future__ import annotations

import json

import pytest

from contactpro.config import Settings
from contactpro.contacts import Contact
from contactpro.errors import ParseError
from contactpro.storage import (
    BACKUP_KEY,
    CONTACTS_KEY,
    THEME_KEY,
    FileKeyValueStore,
    FirestoreKeyValueStore,
    MemoryKeyValueStore,
    PersistenceGateway,
    build_store,
)


class FakeDoc:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return self._data


class FakeDocRef:
    def __init__(self, docs, key):
        self._docs = docs
        self._key = key

    def get(self):
        return FakeDoc(self._docs.get(self._key))

    def set(self, payload):
        self._docs[self._key] = payload


class FakeCollection:
    def __init__(self, docs):
        self._docs = docs

    def document(self, key):
        return FakeDocRef(self._docs, key)


class FakeClient:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return FakeCollection(self.collections.setdefault(name, {}))


class BrokenClient:
    def collection(self, name):
        raise RuntimeError("firestore unavailable")


class TestFileStore:
    def test_missing_key_returns_none(self, tmp_path):
        assert FileKeyValueStore(tmp_path / "data").get("contacts") is None

    def test_set_then_get(self, tmp_path):
        store = FileKeyValueStore(tmp_path / "data")
        store.set("contacts", "[]")
        assert store.get("contacts") == "[]"
        assert (tmp_path / "data" / "contacts").exists()

    def test_key_is_sanitized(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        store.set("a/b", "x")
        assert (tmp_path / "a_b").read_text(encoding="utf-8") == "x"


class TestFirestoreStore:
    def test_reads_and_writes_documents(self, tmp_path):
        client = FakeClient()
        store = FirestoreKeyValueStore("contactpro", FileKeyValueStore(tmp_path), client=client)

        store.set(THEME_KEY, "dark")

        doc = client.collections["contactpro"][THEME_KEY]
        assert doc["value"] == "dark"
        assert doc["updated_at"]
        assert store.get(THEME_KEY) == "dark"
        assert store.get("missing") is None

    def test_falls_back_to_files_on_failure(self, tmp_path):
        store = FirestoreKeyValueStore("contactpro", FileKeyValueStore(tmp_path), client=BrokenClient())

        store.set(CONTACTS_KEY, "[]")

        assert (tmp_path / CONTACTS_KEY).read_text(encoding="utf-8") == "[]"
        assert store.get(CONTACTS_KEY) == "[]"


class TestBuildStore:
    def test_backend_selection(self, tmp_path):
        assert isinstance(build_store(Settings(storage_backend="memory")), MemoryKeyValueStore)
        files = build_store(Settings(storage_backend="file", data_dir=tmp_path))
        assert isinstance(files, FileKeyValueStore)
        assert files.directory == tmp_path
        firestore = build_store(Settings(storage_backend="firestore", data_dir=tmp_path))
        assert isinstance(firestore, FirestoreKeyValueStore)
        assert firestore.fallback.directory == tmp_path


class TestGateway:
    def test_contacts_round_trip(self):
        gateway = PersistenceGateway(MemoryKeyValueStore())
        contacts = [Contact(id="1", name="Ada", email="a@x.com", tags=["x"])]
        gateway.save_contacts(contacts)
        assert gateway.load_contacts() == contacts

    def test_empty_store_has_no_contacts_or_backup(self):
        gateway = PersistenceGateway(MemoryKeyValueStore())
        assert gateway.load_contacts() == []
        assert gateway.load_backup() is None

    def test_corrupt_contacts_raise_parse_error(self):
        gateway = PersistenceGateway(MemoryKeyValueStore({CONTACTS_KEY: "{oops"}))
        with pytest.raises(ParseError):
            gateway.load_contacts()

    def test_backup_document_shape(self):
        kv = MemoryKeyValueStore()
        gateway = PersistenceGateway(kv)
        gateway.save_backup([Contact(id="1", name="Ada", email="a@x.com")])

        data = json.loads(kv.get(BACKUP_KEY))
        assert data["version"] == "1.0"
        assert data["timestamp"]
        assert data["contacts"][0]["name"] == "Ada"

        backup = gateway.load_backup()
        assert backup.contacts[0].id == "1"

    def test_backup_overwrites_previous(self):
        gateway = PersistenceGateway(MemoryKeyValueStore())
        gateway.save_backup([Contact(id="1", name="Ada", email="a@x.com")])
        gateway.save_backup([])
        assert gateway.load_backup().contacts == []

    def test_theme_defaults_to_light(self):
        kv = MemoryKeyValueStore({THEME_KEY: "purple"})
        gateway = PersistenceGateway(kv)
        assert gateway.load_theme() == "light"
        gateway.save_theme("dark")
        assert kv.get(THEME_KEY) == "dark"

    def test_unknown_theme_is_rejected(self):
        with pytest.raises(ValueError):
            PersistenceGateway(MemoryKeyValueStore()).save_theme("purple")
