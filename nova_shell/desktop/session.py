"""Application state for one signed-in desktop.

``DesktopSession`` threads user gestures into the window manager and the file
store client.  Remote calls run through ``asyncio.to_thread`` so that other
intents (opening a window while a save is in flight, say) keep working; the
window manager itself is only touched from the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from ..clients.file_store import FileStoreClient
from ..config import DesktopConfig
from ..exceptions import AuthFailure, RecordNotFound, StoreUnavailable
from ..messaging import InMemoryBus, MessageEnvelope
from ..models import FileRecord, RecordKind, User
from .window_manager import (
    BrowserPayload,
    EditorPayload,
    ExplorerPayload,
    SettingsPayload,
    WindowKind,
    WindowManager,
    WindowPayload,
)

logger = logging.getLogger(__name__)

_WINDOW_TOPICS = (
    "window.opened",
    "window.closed",
    "window.minimized",
    "window.focused",
    "window.maximized",
    "window.restored",
)


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


@dataclass(frozen=True)
class DesktopIcon:
    label: str
    kind: WindowKind
    title: str
    record: Optional[FileRecord] = None


class DesktopSession:
    """Current user, windows, file cache and toast notices."""

    def __init__(self, files: FileStoreClient, config: Optional[DesktopConfig] = None) -> None:
        self.config = config or DesktopConfig()
        self.files = files
        self.bus = InMemoryBus()
        self.wm = WindowManager(self.config, bus=self.bus)
        self.user: Optional[User] = None
        self.login_error: Optional[str] = None
        self.notices: Deque[Notice] = deque(maxlen=self.config.notice_limit)
        self.activity: Deque[MessageEnvelope] = deque(maxlen=200)
        # Bumped by sign_out; results of calls started earlier are discarded.
        self._generation = 0
        for topic in _WINDOW_TOPICS:
            self.bus.subscribe(topic, self.activity.append)

    @property
    def signed_in(self) -> bool:
        return self.user is not None

    # Authentication -------------------------------------------------------

    async def sign_in(self, username: str, password: str) -> Optional[User]:
        return await self._authenticate(self.files.transport.authenticate, username, password)

    async def register(self, username: str, password: str) -> Optional[User]:
        return await self._authenticate(self.files.transport.register, username, password)

    def sign_out(self) -> None:
        if self.user is not None:
            logger.info("Signing out %s", self.user.username)
        self.wm.close_all()
        self.files.clear()
        self.notices.clear()
        self.activity.clear()
        self.user = None
        self.login_error = None
        self._generation += 1

    async def _authenticate(self, call, username: str, password: str) -> Optional[User]:
        if self.user is not None:
            self.sign_out()
        generation = self._generation
        try:
            user = await asyncio.to_thread(call, username, password)
        except AuthFailure as exc:
            if generation == self._generation:
                self.login_error = str(exc)
            return None
        except StoreUnavailable as exc:
            logger.warning("Sign-in for %s failed: %s", username, exc)
            if generation == self._generation:
                self.login_error = "Connection failed"
            return None
        if generation != self._generation:
            logger.info("Dropping sign-in for %s: session was signed out meanwhile", username)
            return None
        self.user = user
        self.login_error = None
        await self.refresh()
        if generation != self._generation:
            return None
        return user

    # Windows --------------------------------------------------------------

    def open_window(self, kind: WindowKind, title: str, payload: Optional[WindowPayload] = None) -> str:
        return self.wm.open(kind, title, payload)

    def open_record(self, record: FileRecord) -> str:
        if record.is_folder:
            return self.wm.open(WindowKind.EXPLORER, record.name, ExplorerPayload(folder_id=record.id))
        return self.wm.open(WindowKind.EDITOR, record.name, EditorPayload(record=record))

    def open_explorer(self, title: str = "File Explorer") -> str:
        return self.wm.open(WindowKind.EXPLORER, title, ExplorerPayload())

    def open_settings(self) -> str:
        return self.wm.open(WindowKind.SETTINGS, "Settings", SettingsPayload(user=self.user))

    def open_browser(self, url: Optional[str] = None) -> str:
        payload = BrowserPayload(url=url) if url else BrowserPayload()
        return self.wm.open(WindowKind.BROWSER, "Nova Browser", payload)

    def desktop_icons(self) -> List[DesktopIcon]:
        icons = [
            DesktopIcon("This PC", WindowKind.EXPLORER, "File Explorer"),
            DesktopIcon("Documents", WindowKind.EXPLORER, "Documents"),
            DesktopIcon("Browser", WindowKind.BROWSER, "Nova Browser"),
        ]
        if self.user is not None:
            for record in self.files.files(self.user.id):
                icons.append(DesktopIcon(record.name, WindowKind.EDITOR, record.name, record))
        return icons

    def activate(self, icon: DesktopIcon) -> str:
        if icon.record is not None:
            return self.open_record(icon.record)
        return self.wm.open(icon.kind, icon.title)

    # Files ------------------------------------------------------------------

    def records(self) -> tuple:
        if self.user is None:
            return ()
        return self.files.records(self.user.id)

    async def refresh(self) -> bool:
        user = self._require_user()
        generation = self._generation
        try:
            await asyncio.to_thread(self.files.list, user.id)
        except StoreUnavailable as exc:
            if not self._stale(generation, user):
                self._notify("error", f"Could not load files: {exc}")
            return False
        return not self._stale(generation, user)

    async def create(self, name: str, kind: RecordKind = RecordKind.FILE, content: str = "") -> Optional[FileRecord]:
        user = self._require_user()
        generation = self._generation
        try:
            record = await asyncio.to_thread(self.files.create, user.id, name, RecordKind(kind), content, None)
        except StoreUnavailable as exc:
            if self._stale(generation, user):
                return None
            self._notify("error", f"Could not create {name}: {exc}")
            return None
        if self._stale(generation, user):
            return None
        if record.kind is RecordKind.FILE:
            self.open_record(record)
        return record

    async def save(self, window_id: str, content: str, name: Optional[str] = None) -> bool:
        user = self._require_user()
        window = self.wm.get(window_id)
        if window is None or not isinstance(window.payload, EditorPayload) or window.payload.record is None:
            self._notify("error", "Nothing to save in this window")
            return False
        record = window.payload.record
        if record.id is None:
            self._notify("error", f"{record.name} has not been stored yet")
            return False
        new_name = name or record.name
        generation = self._generation
        try:
            await asyncio.to_thread(self.files.update, record.id, new_name, content)
        except RecordNotFound:
            if self._stale(generation, user):
                return False
            self._notify("error", f"{record.name} no longer exists")
            return False
        except StoreUnavailable as exc:
            if self._stale(generation, user):
                return False
            self._notify("error", f"Could not save {record.name}: {exc}")
            return False
        if self._stale(generation, user):
            return False
        refreshed = self.files.get(record.id)
        if refreshed is not None:
            # The saving window may have been closed while the save was in flight.
            for editor in self.wm.windows_showing(record.id):
                self.wm.update_payload(editor.id, EditorPayload(record=refreshed))
        self._notify("info", f"Saved {new_name}")
        return True

    async def delete(self, record_id: int) -> bool:
        user = self._require_user()
        generation = self._generation
        try:
            await asyncio.to_thread(self.files.delete, record_id)
        except StoreUnavailable as exc:
            if not self._stale(generation, user):
                self._notify("error", f"Could not delete record {record_id}: {exc}")
            return False
        return not self._stale(generation, user)

    # Helpers --------------------------------------------------------------

    def _require_user(self) -> User:
        if self.user is None:
            raise AuthFailure("Sign in first")
        return self.user

    def _stale(self, generation: int, user: User) -> bool:
        """True when sign_out ran while a call for ``user`` was in flight.

        A listing written by the worker thread after the sign-out is dropped
        from the cache here.
        """
        if generation == self._generation:
            return False
        if self.user is None or self.user.id != user.id:
            self.files.forget(user.id)
        logger.debug("Discarding result for %s from a previous session", user.username)
        return True

    def _notify(self, level: str, message: str) -> None:
        if level == "error":
            logger.warning("%s", message)
        self.notices.append(Notice(level, message))
