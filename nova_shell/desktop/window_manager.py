"""Window stacking and focus state for the NovaOS desktop.

The window manager is a pure state machine: it keeps the open windows, their
z-order and the single focused window, and never performs I/O.  Every window
is stored as a frozen snapshot; transitions swap in a replaced copy.

Lifecycle of one window::

    open ──> visible <──minimize / focus──> minimized
               │  (maximized flag toggles independently)
               └──────────── close ───────────> removed

A closed window is deleted from the collection, so no transition leads out
of it.  Closing or minimizing the focused window leaves nothing focused;
focus is never handed to another window implicitly.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ..config import DesktopConfig
from ..messaging import InMemoryBus, MessageEnvelope
from ..models import FileRecord, User

logger = logging.getLogger(__name__)

_CASCADE_X = 100
_CASCADE_Y = 50
_CASCADE_STEP = 20


class WindowKind(str, Enum):
    EXPLORER = "explorer"
    EDITOR = "editor"
    SETTINGS = "settings"
    BROWSER = "browser"


@dataclass(frozen=True)
class ExplorerPayload:
    folder_id: Optional[int] = None


@dataclass(frozen=True)
class EditorPayload:
    record: Optional[FileRecord] = None


@dataclass(frozen=True)
class SettingsPayload:
    user: Optional[User] = None


@dataclass(frozen=True)
class BrowserPayload:
    url: str = "https://www.google.com"


WindowPayload = Union[ExplorerPayload, EditorPayload, SettingsPayload, BrowserPayload]

PAYLOAD_TYPES: Dict[WindowKind, type] = {
    WindowKind.EXPLORER: ExplorerPayload,
    WindowKind.EDITOR: EditorPayload,
    WindowKind.SETTINGS: SettingsPayload,
    WindowKind.BROWSER: BrowserPayload,
}


@dataclass(frozen=True)
class Window:
    id: str
    title: str
    kind: WindowKind
    z_index: int
    payload: WindowPayload = field(default_factory=ExplorerPayload)
    is_minimized: bool = False
    is_maximized: bool = False
    width: int = 800
    height: int = 500

    @property
    def is_open(self) -> bool:
        return True


@dataclass(frozen=True)
class Geometry:
    x: int
    y: int
    width: int
    height: int


class WindowManager:
    """Owns the open windows, their stacking order and the focused window."""

    def __init__(self, config: Optional[DesktopConfig] = None, bus: Optional[InMemoryBus] = None) -> None:
        self.config = config or DesktopConfig()
        self.bus = bus
        self._windows: Dict[str, Window] = {}
        self.focused_id: Optional[str] = None
        self.start_menu_open = False

    # Intents -------------------------------------------------------------

    def open(self, kind: WindowKind, title: str, payload: Optional[WindowPayload] = None) -> str:
        kind = WindowKind(kind)
        payload = self._coerce_payload(kind, payload)
        window_id = uuid.uuid4().hex
        window = Window(
            id=window_id,
            title=title,
            kind=kind,
            z_index=self._max_z() + self.config.open_z_step,
            payload=payload,
            width=self.config.default_width,
            height=self.config.default_height,
        )
        self._windows[window_id] = window
        self.focused_id = window_id
        self.start_menu_open = False
        self._publish("window.opened", window)
        return window_id

    def close(self, window_id: str) -> None:
        window = self._windows.pop(window_id, None)
        if window is None:
            return
        if self.focused_id == window_id:
            self.focused_id = None
        self._publish("window.closed", window)

    def minimize(self, window_id: str) -> None:
        window = self._windows.get(window_id)
        if window is None:
            return
        self._windows[window_id] = window = replace(window, is_minimized=True)
        if self.focused_id == window_id:
            self.focused_id = None
        self._publish("window.minimized", window)

    def focus(self, window_id: str) -> None:
        window = self._windows.get(window_id)
        if window is None:
            return
        self._windows[window_id] = window = replace(window, z_index=self._max_z() + 1, is_minimized=False)
        self.focused_id = window_id
        self._publish("window.focused", window)

    def toggle_maximize(self, window_id: str) -> None:
        window = self._windows.get(window_id)
        if window is None:
            return
        self._windows[window_id] = window = replace(window, is_maximized=not window.is_maximized)
        self._publish("window.maximized" if window.is_maximized else "window.restored", window)

    def resize(self, window_id: str, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("window size must be positive")
        window = self._windows.get(window_id)
        if window is None:
            return
        self._windows[window_id] = replace(window, width=int(width), height=int(height))

    def update_payload(self, window_id: str, payload: WindowPayload) -> bool:
        """Swap a window's payload snapshot; False when the window is gone."""
        window = self._windows.get(window_id)
        if window is None:
            return False
        self._windows[window_id] = replace(window, payload=self._coerce_payload(window.kind, payload))
        return True

    def toggle_start_menu(self) -> bool:
        self.start_menu_open = not self.start_menu_open
        return self.start_menu_open

    def close_all(self) -> None:
        for window_id in list(self._windows):
            self.close(window_id)
        self.start_menu_open = False

    # Queries -------------------------------------------------------------

    def get(self, window_id: str) -> Optional[Window]:
        return self._windows.get(window_id)

    def windows(self) -> List[Window]:
        return list(self._windows.values())

    def focused(self) -> Optional[Window]:
        if self.focused_id is None:
            return None
        return self._windows.get(self.focused_id)

    def render_set(self) -> List[Window]:
        """Windows that are drawn, back to front."""
        visible = [w for w in self._windows.values() if w.is_open and not w.is_minimized]
        return sorted(visible, key=lambda w: w.z_index)

    def taskbar(self) -> List[Window]:
        return self.windows()

    def windows_showing(self, record_id: int) -> List[Window]:
        return [
            w for w in self._windows.values()
            if isinstance(w.payload, EditorPayload) and w.payload.record is not None and w.payload.record.id == record_id
        ]

    def geometry(self, window_id: str, viewport: Optional[Tuple[int, int]] = None) -> Optional[Geometry]:
        window = self._windows.get(window_id)
        if window is None:
            return None
        width, height = viewport or (self.config.viewport_width, self.config.viewport_height)
        if window.is_maximized:
            return Geometry(0, 0, width, max(0, height - self.config.taskbar_height))
        offset = window.z_index * _CASCADE_STEP
        return Geometry(_CASCADE_X + offset, _CASCADE_Y + offset, window.width, window.height)

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, window_id: object) -> bool:
        return window_id in self._windows

    # Helpers -------------------------------------------------------------

    def _max_z(self) -> int:
        return max((w.z_index for w in self._windows.values()), default=0)

    @staticmethod
    def _coerce_payload(kind: WindowKind, payload: Optional[WindowPayload]) -> WindowPayload:
        expected = PAYLOAD_TYPES[kind]
        if payload is None:
            return expected()
        if not isinstance(payload, expected):
            raise ValueError(f"{kind.value} windows take {expected.__name__}, got {type(payload).__name__}")
        return payload

    def _publish(self, topic: str, window: Window) -> None:
        logger.debug("%s %s (%s, z=%d)", topic, window.id, window.kind.value, window.z_index)
        if self.bus is None:
            return
        self.bus.publish(
            MessageEnvelope(
                topic=topic,
                payload={"window_id": window.id, "title": window.title, "kind": window.kind.value},
            )
        )
