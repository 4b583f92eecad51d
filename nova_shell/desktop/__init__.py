"""Desktop state: window manager and per-user session."""

from .session import DesktopIcon, DesktopSession, Notice  # noqa: F401
from .window_manager import WindowKind, WindowManager  # noqa: F401
