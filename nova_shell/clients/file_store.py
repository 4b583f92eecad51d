"""Read-through cache of the record store, refreshed after every mutation.

The cache never holds a locally synthesized record.  Each owner's entry is
either the last listing the store returned in full or, when a call fails,
the listing that preceded it.  Mutations are always followed by a complete
re-list instead of a local patch; the record count per user is small, and a
single source of truth keeps the desktop and the store from drifting apart.

Replacing an owner's snapshot is a single assignment under a lock, so a
reader on another thread sees either the old tuple or the new one.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Optional, Tuple

from ..exceptions import StoreUnavailable
from ..models import FileRecord, RecordKind
from .store_client import StoreClient

logger = logging.getLogger(__name__)

Snapshot = Tuple[FileRecord, ...]


class FileStoreClient:
    """Mediates desktop gestures and the remote record store."""

    def __init__(self, transport: StoreClient) -> None:
        self.transport = transport
        self._snapshots: Dict[int, Snapshot] = {}
        self._lock = threading.Lock()

    # Remote operations ----------------------------------------------------

    def list(self, owner_id: int) -> Snapshot:
        records = tuple(self.transport.list_records(owner_id))
        with self._lock:
            self._snapshots[owner_id] = records
        logger.debug("Cached %d records for owner %s", len(records), owner_id)
        return records

    def create(
        self,
        owner_id: int,
        name: str,
        kind: RecordKind = RecordKind.FILE,
        content: str = "",
        parent_id: Optional[int] = None,
    ) -> FileRecord:
        record_id = self.transport.create_record(owner_id, name, kind, content=content, parent_id=parent_id)
        snapshot = self.list(owner_id)
        for record in snapshot:
            if record.id == record_id:
                return record
        raise StoreUnavailable(f"created record {record_id} missing from listing")

    def update(self, record_id: int, name: str, content: str) -> bool:
        self.transport.update_record(record_id, name, content)
        self._refresh_after_mutation(record_id)
        return True

    def delete(self, record_id: int) -> bool:
        self.transport.delete_record(record_id)
        self._refresh_after_mutation(record_id)
        return True

    # Cache accessors ------------------------------------------------------

    def records(self, owner_id: int) -> Snapshot:
        with self._lock:
            return self._snapshots.get(owner_id, ())

    def files(self, owner_id: int) -> Snapshot:
        return tuple(record for record in self.records(owner_id) if record.kind is RecordKind.FILE)

    def get(self, record_id: int) -> Optional[FileRecord]:
        for snapshot in self._all_snapshots():
            for record in snapshot:
                if record.id == record_id:
                    return record
        return None

    def forget(self, owner_id: int) -> None:
        with self._lock:
            self._snapshots.pop(owner_id, None)

    def clear(self) -> None:
        with self._lock:
            self._snapshots = {}

    # Helpers --------------------------------------------------------------

    def _all_snapshots(self) -> Iterable[Snapshot]:
        with self._lock:
            return list(self._snapshots.values())

    def _refresh_after_mutation(self, record_id: int) -> None:
        cached = self.get(record_id)
        if cached is not None:
            owners = [cached.owner_id]
        else:
            with self._lock:
                owners = list(self._snapshots)
        for owner_id in owners:
            self.list(owner_id)
