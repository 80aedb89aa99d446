"""Tests for the FastAPI service."""
from __future__ import annotations

import threading
import time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from contactpro.api import dependencies
from contactpro.api.main import create_app
from contactpro.manager import ContactManager
from contactpro.storage import MemoryKeyValueStore


@pytest.fixture
def manager():
    return ContactManager.from_store(MemoryKeyValueStore())


@pytest.fixture
def client(manager):
    return TestClient(create_app(manager))


def _create(client: TestClient, name: str, **extra) -> dict:
    resp = client.post("/contacts", json={"name": name, "email": f"{name.lower()}@example.com", **extra})
    assert resp.status_code == 201
    return resp.json()


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert "storage" in body


class TestContactEndpoints:
    def test_create_and_list(self, client):
        _create(client, "Bob")
        _create(client, "Ada", tags="vip, family")

        body = client.get("/contacts").json()
        assert body["count"] == 2
        assert [c["name"] for c in body["contacts"]] == ["Ada", "Bob"]
        assert body["contacts"][0]["tags"] == ["vip", "family"]
        assert body["canUndo"] is True

    def test_create_requires_name_and_email(self, client):
        resp = client.post("/contacts", json={"name": "Ada"})
        assert resp.status_code == 400
        assert "required" in resp.json()["detail"]

    def test_filters_via_query(self, client):
        _create(client, "Ada", tags=["vip"])
        _create(client, "Bob")

        body = client.get("/contacts", params={"tag": "vip"}).json()
        assert [c["name"] for c in body["contacts"]] == ["Ada"]
        assert body["filters"]["tag"] == "vip"

        body = client.get("/contacts", params={"tag": "", "search": "BOB"}).json()
        assert [c["name"] for c in body["contacts"]] == ["Bob"]

    def test_get_update_delete(self, client):
        ada = _create(client, "Ada")

        assert client.get(f"/contacts/{ada['id']}").json()["name"] == "Ada"

        resp = client.put(f"/contacts/{ada['id']}", json={"phone": "555"})
        assert resp.status_code == 200
        assert resp.json()["phone"] == "555"
        assert resp.json()["email"] == "ada@example.com"

        resp = client.delete(f"/contacts/{ada['id']}")
        assert resp.json() == {"removed": 1, "count": 0}

    def test_update_missing_contact_is_404(self, client):
        resp = client.put("/contacts/missing", json={"name": "X"})
        assert resp.status_code == 404

    def test_bulk_delete(self, client):
        ids = [_create(client, name)["id"] for name in ("A", "B", "C")]
        resp = client.post("/contacts/bulk-delete", json={"contactIds": [ids[0], ids[2]]})
        assert resp.json()["removed"] == 2
        remaining = client.get("/contacts").json()["contacts"]
        assert [c["id"] for c in remaining] == [ids[1]]

    def test_tags(self, client):
        _create(client, "Ada", tags=["vip", "work"])
        assert client.get("/contacts/tags").json() == {"tags": ["vip", "work"]}


class TestDataEndpoints:
    def test_undo_redo(self, client):
        _create(client, "Ada")

        body = client.post("/history/undo").json()
        assert body["changed"] is True
        assert body["count"] == 0

        body = client.post("/history/redo").json()
        assert body["changed"] is True
        assert body["count"] == 1

        assert client.post("/history/redo").json()["changed"] is False

    def test_export_csv(self, client):
        _create(client, "Ada")
        resp = client.get("/export", params={"format": "csv"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "contacts.csv" in resp.headers["content-disposition"]
        assert resp.text.splitlines()[1].startswith('"Ada","ada@example.com"')

    def test_export_rejects_unknown_format(self, client):
        assert client.get("/export", params={"format": "xml"}).status_code == 422

    def test_import_json(self, client):
        payload = '[{"id": "x1", "name": "Zed", "email": "z@x.com", "tags": []}]'
        resp = client.post("/import", json={"format": "json", "content": payload})
        assert resp.status_code == 200
        assert resp.json() == {"imported": 1, "warnings": []}
        assert client.get("/contacts/x1").json()["name"] == "Zed"

    def test_import_bad_payload(self, client):
        resp = client.post("/import", json={"format": "json", "content": "nope"})
        assert resp.status_code == 400

    def test_restore_without_backup_is_404(self, client):
        assert client.post("/restore").status_code == 404

    def test_backup_and_restore(self, client):
        _create(client, "Ada")
        backup = client.post("/backup").json()
        assert backup["version"] == "1.0"
        assert backup["count"] == 1

        _create(client, "Bob")
        body = client.post("/restore").json()
        assert [c["name"] for c in body["contacts"]] == ["Ada"]

    def test_theme(self, client):
        assert client.get("/theme").json() == {"theme": "light"}
        assert client.post("/theme/toggle").json() == {"theme": "dark"}


class TestManagerDependency:
    def test_concurrent_first_requests_share_one_manager(self, monkeypatch):
        built = []

        class SlowManager:
            @staticmethod
            def from_settings(settings):
                time.sleep(0.05)
                manager = ContactManager.from_store(MemoryKeyValueStore())
                built.append(manager)
                return manager

        monkeypatch.setattr(dependencies, "ContactManager", SlowManager)
        monkeypatch.setattr(dependencies, "get_settings", lambda: None)
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(manager=None)))

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(dependencies.get_manager(request)))
            for _ in range(2)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(built) == 1
        assert results[0] is results[1] is built[0]
