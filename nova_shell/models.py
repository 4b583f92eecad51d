"""Data models shared by the store, the client and the desktop."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class RecordKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class User:
    id: int
    username: str


@dataclass(frozen=True)
class FileRecord:
    """A file or folder as last reported by the store."""

    id: Optional[int]
    owner_id: int
    name: str
    content: str = ""
    kind: RecordKind = RecordKind.FILE
    parent_id: Optional[int] = None

    @property
    def is_folder(self) -> bool:
        return self.kind is RecordKind.FOLDER

    @classmethod
    def from_wire(cls, payload: Dict[str, Any]) -> "FileRecord":
        parent_id = payload.get("parentId")
        return cls(
            id=int(payload["id"]) if payload.get("id") is not None else None,
            owner_id=int(payload["ownerId"]),
            name=str(payload.get("name") or ""),
            content=str(payload.get("content") or ""),
            kind=RecordKind(payload.get("kind", RecordKind.FILE.value)),
            parent_id=int(parent_id) if parent_id is not None else None,
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "content": self.content,
            "kind": self.kind.value,
            "parentId": self.parent_id,
        }


@dataclass
class ObservabilityEvent:
    event_type: str
    message: str
    attributes: Optional[dict] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
