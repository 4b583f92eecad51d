"""HTTP transport for the record store wire contract."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ..exceptions import AuthFailure, RecordNotFound, StoreUnavailable
from ..models import FileRecord, RecordKind, User

_LOGGER = logging.getLogger("nova_shell.clients.store_client")

_HTTP_NOT_FOUND = 404
_AUTH_REJECTIONS = (400, 401)


@dataclass
class StoreClient:
    base_url: str
    timeout: float = 5.0
    http_client: Any = field(default_factory=requests.Session)

    def _url(self, suffix: str) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}{suffix}"

    # Principals -----------------------------------------------------------

    def register(self, username: str, password: str) -> User:
        payload = self._auth_call("/api/auth/register", username, password)
        try:
            return User(id=int(payload["userId"]), username=username)
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailable("register response carried no user id") from exc

    def authenticate(self, username: str, password: str) -> User:
        payload = self._auth_call("/api/auth/login", username, password)
        user = payload.get("user")
        try:
            return User(id=int(user["id"]), username=str(user.get("username", username)))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailable("login response carried no user") from exc

    # Records --------------------------------------------------------------

    def list_records(self, owner_id: int) -> List[FileRecord]:
        response = self._send("get", f"/api/files/{owner_id}")
        self._raise_for_status(response)
        payload = self._decode(response)
        if not isinstance(payload, list):
            raise StoreUnavailable("record listing is not a list")
        try:
            return [FileRecord.from_wire(item) for item in payload]
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailable(f"malformed record in listing: {exc}") from exc

    def create_record(
        self,
        owner_id: int,
        name: str,
        kind: RecordKind,
        content: str = "",
        parent_id: Optional[int] = None,
    ) -> int:
        body = {
            "ownerId": owner_id,
            "name": name,
            "content": content,
            "kind": RecordKind(kind).value,
            "parentId": parent_id,
        }
        response = self._send("post", "/api/files", json=body)
        self._raise_for_status(response)
        payload = self._decode(response)
        try:
            return int(payload["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailable("create response carried no id") from exc

    def update_record(self, record_id: int, name: str, content: str) -> bool:
        response = self._send("put", f"/api/files/{record_id}", json={"content": content, "name": name})
        if response.status_code == _HTTP_NOT_FOUND:
            raise RecordNotFound(record_id)
        self._raise_for_status(response)
        return self._ack(response)

    def delete_record(self, record_id: int) -> bool:
        response = self._send("delete", f"/api/files/{record_id}")
        self._raise_for_status(response)
        return self._ack(response)

    # Helpers --------------------------------------------------------------

    def _auth_call(self, suffix: str, username: str, password: str) -> Dict[str, Any]:
        response = self._send("post", suffix, json={"username": username, "password": password})
        if response.status_code in _AUTH_REJECTIONS:
            payload = self._decode(response)
            error = payload.get("error") if isinstance(payload, dict) else None
            raise AuthFailure(error or "Authentication failed")
        self._raise_for_status(response)
        payload = self._decode(response)
        if not isinstance(payload, dict):
            raise StoreUnavailable("auth response is not an object")
        if not payload.get("success"):
            raise AuthFailure(payload.get("error") or "Authentication failed")
        return payload

    def _send(self, method: str, suffix: str, **kwargs):
        url = self._url(suffix)
        try:
            return getattr(self.http_client, method)(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            _LOGGER.warning("%s %s failed: %s", method.upper(), url, exc)
            raise StoreUnavailable(str(exc)) from exc

    @staticmethod
    def _raise_for_status(response) -> None:
        if response.status_code >= 400:
            raise StoreUnavailable(f"store answered HTTP {response.status_code}")

    @classmethod
    def _ack(cls, response) -> bool:
        payload = cls._decode(response)
        if isinstance(payload, dict):
            return bool(payload.get("success", True))
        return True

    @staticmethod
    def _decode(response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise StoreUnavailable("store answered with a non-JSON body") from exc
