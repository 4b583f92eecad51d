from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

import pytest

from nova_shell.clients.file_store import FileStoreClient
from nova_shell.exceptions import AuthFailure, RecordNotFound, StoreUnavailable
from nova_shell.models import FileRecord, RecordKind, User


class FakeStore:
    """In-memory stand-in for ``StoreClient`` with switchable outages."""

    def __init__(self) -> None:
        self.users: Dict[str, tuple] = {}
        self.rows: Dict[int, FileRecord] = {}
        self.offline = False
        self.calls: List[str] = []
        self._next_user = 1
        self._next_record = 1
        self._gates: Dict[str, Tuple[threading.Event, threading.Event]] = {}

    def hold(self, name: str) -> Tuple[threading.Event, threading.Event]:
        """Block the next ``name`` call until the returned release event is set."""
        gate = (threading.Event(), threading.Event())
        self._gates[name] = gate
        return gate

    def _check(self, name: str) -> None:
        self.calls.append(name)
        gate = self._gates.pop(name, None)
        if gate is not None:
            entered, release = gate
            entered.set()
            release.wait(timeout=5)
        if self.offline:
            raise StoreUnavailable("store offline")

    def register(self, username: str, password: str) -> User:
        self._check("register")
        if username in self.users:
            raise AuthFailure("Username already exists")
        user = User(id=self._next_user, username=username)
        self._next_user += 1
        self.users[username] = (password, user)
        return user

    def authenticate(self, username: str, password: str) -> User:
        self._check("authenticate")
        stored = self.users.get(username)
        if stored is None or stored[0] != password:
            raise AuthFailure("Invalid credentials")
        return stored[1]

    def list_records(self, owner_id: int) -> List[FileRecord]:
        self._check("list")
        return [row for _, row in sorted(self.rows.items()) if row.owner_id == owner_id]

    def create_record(
        self,
        owner_id: int,
        name: str,
        kind: RecordKind,
        content: str = "",
        parent_id: Optional[int] = None,
    ) -> int:
        self._check("create")
        record_id = self._next_record
        self._next_record += 1
        self.rows[record_id] = FileRecord(record_id, owner_id, name, content, RecordKind(kind), parent_id)
        return record_id

    def update_record(self, record_id: int, name: str, content: str) -> bool:
        self._check("update")
        row = self.rows.get(record_id)
        if row is None:
            raise RecordNotFound(record_id)
        self.rows[record_id] = FileRecord(row.id, row.owner_id, name, content, row.kind, row.parent_id)
        return True

    def delete_record(self, record_id: int) -> bool:
        self._check("delete")
        self.rows.pop(record_id, None)
        return True


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def file_store(fake_store: FakeStore) -> FileStoreClient:
    return FileStoreClient(fake_store)
