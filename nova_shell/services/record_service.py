"""Authoritative CRUD over file and folder records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select

from ..exceptions import RecordNotFound
from ..models import FileRecord, RecordKind
from ..storage.database import RecordRow
from .base import BaseService


@dataclass
class RecordService(BaseService):

    def list_for_owner(self, owner_id: int) -> List[FileRecord]:
        with self.session_factory() as session:
            rows = session.scalars(
                select(RecordRow).where(RecordRow.owner_id == owner_id).order_by(RecordRow.id)
            ).all()
            records = [_to_record(row) for row in rows]
        self.emit_metric("records_listed", len(records), owner_id=str(owner_id))
        return records

    def create(
        self,
        owner_id: int,
        name: str,
        kind: RecordKind,
        content: str = "",
        parent_id: Optional[int] = None,
    ) -> FileRecord:
        with self.session_factory.begin() as session:
            row = RecordRow(
                owner_id=owner_id,
                name=name,
                content=content or "",
                kind=RecordKind(kind).value,
                parent_id=parent_id,
            )
            session.add(row)
            session.flush()
            record = _to_record(row)
        self.emit_event("record_created", record_id=str(record.id), owner_id=str(owner_id))
        return record

    def update(self, record_id: int, name: str, content: str) -> FileRecord:
        with self.session_factory.begin() as session:
            row = session.get(RecordRow, record_id)
            if row is None:
                raise RecordNotFound(record_id)
            row.name = name
            row.content = content or ""
            record = _to_record(row)
        self.emit_event("record_updated", record_id=str(record_id))
        return record

    def delete(self, record_id: int) -> bool:
        """Remove a record; returns whether a row actually existed."""
        with self.session_factory.begin() as session:
            row = session.get(RecordRow, record_id)
            if row is None:
                return False
            session.delete(row)
        self.emit_event("record_deleted", record_id=str(record_id))
        return True


def _to_record(row: RecordRow) -> FileRecord:
    return FileRecord(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        content=row.content or "",
        kind=RecordKind(row.kind),
        parent_id=row.parent_id,
    )
