"""FastAPI tests covering the record store wire contract."""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event

# Keep the module-level runtime off disk during tests
os.environ.setdefault("NOVA_SHELL_DATABASE_URL", "sqlite://")

from nova_shell.api import server as api_server  # noqa: E402  (env vars must be set first)
from nova_shell.config import DatabaseConfig, ShellConfig  # noqa: E402
from nova_shell.models import RecordKind  # noqa: E402
from nova_shell.runtime import ShellRuntime  # noqa: E402
from nova_shell.storage.database import Principal, build_engine  # noqa: E402


@pytest.fixture
def client() -> TestClient:
    # Re-bootstrap runtime each test for isolation.
    config = ShellConfig.default()
    config.database = DatabaseConfig(dsn="sqlite://")
    api_server.runtime = ShellRuntime.bootstrap(config)
    return TestClient(api_server.app)


def _register(client: TestClient, username: str, password: str = "pw") -> int:
    resp = client.post("/api/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 200
    return resp.json()["userId"]


def test_register_assigns_ids_and_rejects_duplicates(client: TestClient) -> None:
    first = client.post("/api/auth/register", json={"username": "alice", "password": "pw1"})
    assert first.status_code == 200
    assert first.json() == {"success": True, "userId": 1}

    second = client.post("/api/auth/register", json={"username": "alice", "password": "pw2"})
    assert second.status_code == 400
    assert second.json()["error"] == "Username already exists"


def test_login_returns_user_or_error(client: TestClient) -> None:
    user_id = _register(client, "bob", "secret")

    ok = client.post("/api/auth/login", json={"username": "bob", "password": "secret"})
    assert ok.status_code == 200
    assert ok.json() == {"success": True, "user": {"id": user_id, "username": "bob"}}

    bad = client.post("/api/auth/login", json={"username": "bob", "password": "nope"})
    assert bad.status_code == 401
    assert "error" in bad.json()


def test_passwords_are_not_stored_in_clear(client: TestClient) -> None:
    _register(client, "carol", "hunter2")
    with api_server.runtime.session_factory() as session:
        stored = session.get(Principal, 1).password
    assert stored != "hunter2"
    assert stored.startswith("sha256:")


def test_create_then_list_returns_exact_record(client: TestClient) -> None:
    owner_id = _register(client, "alice")
    resp = client.post(
        "/api/files",
        json={"ownerId": owner_id, "name": "a.txt", "content": "hi", "kind": "file", "parentId": None},
    )
    assert resp.status_code == 200
    record_id = resp.json()["id"]
    assert record_id is not None

    listing = client.get(f"/api/files/{owner_id}")
    assert listing.status_code == 200
    assert listing.json() == [
        {"id": record_id, "ownerId": owner_id, "name": "a.txt", "content": "hi", "kind": "file", "parentId": None}
    ]


def test_listing_is_scoped_to_owner_and_ordered(client: TestClient) -> None:
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    for name in ("one", "two", "three"):
        client.post("/api/files", json={"ownerId": alice, "name": name, "kind": "file"}).raise_for_status()
    client.post("/api/files", json={"ownerId": bob, "name": "docs", "kind": "folder"}).raise_for_status()

    names = [record["name"] for record in client.get(f"/api/files/{alice}").json()]
    assert names == ["one", "two", "three"]
    bob_records = client.get(f"/api/files/{bob}").json()
    assert [(r["name"], r["kind"]) for r in bob_records] == [("docs", "folder")]
    assert client.get("/api/files/99").json() == []


def test_update_changes_name_and_content_only(client: TestClient) -> None:
    owner_id = _register(client, "alice")
    folder_id = client.post("/api/files", json={"ownerId": owner_id, "name": "docs", "kind": "folder"}).json()["id"]
    record_id = client.post(
        "/api/files",
        json={"ownerId": owner_id, "name": "a.txt", "content": "hi", "kind": "file", "parentId": folder_id},
    ).json()["id"]

    resp = client.put(f"/api/files/{record_id}", json={"name": "b.txt", "content": "bye"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    updated = next(r for r in client.get(f"/api/files/{owner_id}").json() if r["id"] == record_id)
    assert updated == {
        "id": record_id,
        "ownerId": owner_id,
        "name": "b.txt",
        "content": "bye",
        "kind": "file",
        "parentId": folder_id,
    }


def test_update_unknown_record_is_not_found(client: TestClient) -> None:
    resp = client.put("/api/files/404", json={"name": "x", "content": "y"})
    assert resp.status_code == 404


def test_delete_is_idempotent(client: TestClient) -> None:
    owner_id = _register(client, "alice")
    record_id = client.post("/api/files", json={"ownerId": owner_id, "name": "a.txt", "kind": "file"}).json()["id"]

    assert client.delete(f"/api/files/{record_id}").json() == {"success": True}
    assert client.get(f"/api/files/{owner_id}").json() == []
    again = client.delete(f"/api/files/{record_id}")
    assert again.status_code == 200
    assert again.json() == {"success": True}


def test_deleting_folder_leaves_children(client: TestClient) -> None:
    owner_id = _register(client, "alice")
    folder_id = client.post("/api/files", json={"ownerId": owner_id, "name": "docs", "kind": "folder"}).json()["id"]
    child_id = client.post(
        "/api/files", json={"ownerId": owner_id, "name": "a.txt", "kind": "file", "parentId": folder_id}
    ).json()["id"]

    client.delete(f"/api/files/{folder_id}").raise_for_status()
    remaining = client.get(f"/api/files/{owner_id}").json()
    assert [r["id"] for r in remaining] == [child_id]


def test_invalid_kind_is_rejected(client: TestClient) -> None:
    resp = client.post("/api/files", json={"ownerId": 1, "name": "x", "kind": "symlink"})
    assert resp.status_code == 422


def test_store_emits_telemetry(client: TestClient) -> None:
    owner_id = _register(client, "alice")
    client.post("/api/files", json={"ownerId": owner_id, "name": "a.txt", "kind": "file"}).raise_for_status()
    telemetry = api_server.runtime.telemetry
    assert telemetry.events_named("principal_registered")
    assert telemetry.events_named("record_created")


def test_listing_records_metric(client: TestClient) -> None:
    owner_id = _register(client, "alice")
    client.get(f"/api/files/{owner_id}")
    metrics = [m for m in api_server.runtime.telemetry.metrics if m["name"] == "records_listed"]
    assert metrics[-1]["value"] == 0
    assert metrics[-1]["owner_id"] == str(owner_id)


def test_folder_delete_succeeds_with_foreign_keys_enforced() -> None:
    config = ShellConfig.default()
    config.database = DatabaseConfig(dsn="sqlite://")
    engine = build_engine(config.database)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    runtime = ShellRuntime.bootstrap(config, engine=engine)
    owner = runtime.principal_service.register("alice", "pw")
    folder = runtime.record_service.create(owner.id, "docs", RecordKind.FOLDER)
    child = runtime.record_service.create(owner.id, "a.txt", RecordKind.FILE, parent_id=folder.id)

    assert runtime.record_service.delete(folder.id) is True
    remaining = runtime.record_service.list_for_owner(owner.id)
    assert [(r.id, r.parent_id) for r in remaining] == [(child.id, folder.id)]
