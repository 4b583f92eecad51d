"""Text-mode NovaOS desktop driven over the record store API."""

from __future__ import annotations

import asyncio
import cmd
import shlex
from typing import List, Optional

from .desktop.session import DesktopSession
from .desktop.window_manager import Window, WindowKind
from .exceptions import AuthFailure
from .models import RecordKind

_APPS = {
    "explorer": WindowKind.EXPLORER,
    "settings": WindowKind.SETTINGS,
    "browser": WindowKind.BROWSER,
}


class NovaShell(cmd.Cmd):
    intro = "NovaOS desktop shell. Type 'help' for commands."
    prompt = "nova> "

    def __init__(self, session: DesktopSession, stdout=None):
        super().__init__(stdout=stdout)
        self.session = session

    # Helpers ------------------------------------------------------------
    def _print(self, message: str) -> None:
        self.stdout.write(message + "\n")

    def _parse(self, arg: str) -> List[str]:
        try:
            return shlex.split(arg)
        except ValueError as exc:
            self._print(f"Parse error: {exc}")
            return []

    def _run(self, coro):
        try:
            return asyncio.run(coro)
        except AuthFailure as exc:
            self._print(str(exc))
            return None

    def _flush_notices(self) -> None:
        while self.session.notices:
            notice = self.session.notices.popleft()
            self._print(f"[{notice.level}] {notice.message}")

    def _resolve_window(self, token: str) -> Optional[Window]:
        taskbar = self.session.wm.taskbar()
        if token.isdigit():
            index = int(token) - 1
            if 0 <= index < len(taskbar):
                return taskbar[index]
        matches = [window for window in taskbar if window.id.startswith(token)]
        if len(matches) == 1:
            return matches[0]
        self._print(f"No window matches '{token}'")
        return None

    def _window_arg(self, arg: str, usage: str) -> Optional[Window]:
        tokens = self._parse(arg)
        if not tokens:
            self._print(f"Usage: {usage}")
            return None
        return self._resolve_window(tokens[0])

    def postcmd(self, stop: bool, line: str) -> bool:
        self._flush_notices()
        return stop

    # Account commands ---------------------------------------------------
    def do_register(self, arg: str) -> None:
        """register USERNAME PASSWORD -- create an account and sign in"""

        tokens = self._parse(arg)
        if len(tokens) != 2:
            self._print("Usage: register USERNAME PASSWORD")
            return
        user = self._run(self.session.register(*tokens))
        if user is None:
            self._print(self.session.login_error or "Registration failed")
            return
        self._print(f"Welcome, {user.username} (id {user.id})")

    def do_login(self, arg: str) -> None:
        """login USERNAME PASSWORD -- sign in and load files"""

        tokens = self._parse(arg)
        if len(tokens) != 2:
            self._print("Usage: login USERNAME PASSWORD")
            return
        user = self._run(self.session.sign_in(*tokens))
        if user is None:
            self._print(self.session.login_error or "Sign-in failed")
            return
        self._print(f"Signed in as {user.username}")

    def do_logout(self, arg: str) -> None:  # pylint: disable=unused-argument
        """logout -- sign out and close every window"""

        self.session.sign_out()
        self._print("Signed out")

    # File commands ------------------------------------------------------
    def do_ls(self, arg: str) -> None:  # pylint: disable=unused-argument
        """ls -- list cached files and folders"""

        records = self.session.records()
        if not records:
            self._print("No files")
            return
        for record in records:
            self._print(f"{record.id:>4} {record.kind.value:6} {record.name}")

    def do_refresh(self, arg: str) -> None:  # pylint: disable=unused-argument
        """refresh -- reload the file listing from the store"""

        if self._run(self.session.refresh()):
            self._print(f"{len(self.session.records())} records")

    def do_new(self, arg: str) -> None:
        """new NAME [--folder] [--content TEXT] -- create a file (opens an editor) or folder"""

        tokens = self._parse(arg)
        if not tokens:
            self._print("Usage: new NAME [--folder] [--content TEXT]")
            return
        name = tokens[0]
        kind = RecordKind.FILE
        content = ""
        key = None
        for token in tokens[1:]:
            if token == "--folder":
                kind = RecordKind.FOLDER
                continue
            if token.startswith("--"):
                key = token[2:]
                continue
            if key == "content":
                content = token
        record = self._run(self.session.create(name, kind, content))
        if record is not None:
            self._print(f"Created {record.kind.value} '{record.name}' (id {record.id})")

    def do_open(self, arg: str) -> None:
        """open RECORD_ID -- open a cached file in the editor or a folder in the explorer"""

        tokens = self._parse(arg)
        if not tokens or not tokens[0].isdigit():
            self._print("Usage: open RECORD_ID")
            return
        record = self.session.files.get(int(tokens[0]))
        if record is None:
            self._print(f"Record {tokens[0]} not found; try 'refresh'")
            return
        window_id = self.session.open_record(record)
        self._print(f"Opened '{record.name}' in window {window_id[:8]}")

    def do_save(self, arg: str) -> None:
        """save WINDOW CONTENT [--name NEW_NAME] -- save editor content to the store"""

        tokens = self._parse(arg)
        if len(tokens) < 2:
            self._print("Usage: save WINDOW CONTENT [--name NEW_NAME]")
            return
        window = self._resolve_window(tokens[0])
        if window is None:
            return
        name = None
        if len(tokens) >= 4 and tokens[2] == "--name":
            name = tokens[3]
        self._run(self.session.save(window.id, tokens[1], name=name))

    def do_rm(self, arg: str) -> None:
        """rm RECORD_ID -- delete a file or folder"""

        tokens = self._parse(arg)
        if not tokens or not tokens[0].isdigit():
            self._print("Usage: rm RECORD_ID")
            return
        if self._run(self.session.delete(int(tokens[0]))):
            self._print(f"Deleted record {tokens[0]}")

    # Window commands ----------------------------------------------------
    def do_app(self, arg: str) -> None:
        """app explorer|settings|browser -- launch an application window"""

        tokens = self._parse(arg)
        kind = _APPS.get(tokens[0]) if tokens else None
        if kind is None:
            self._print("Usage: app explorer|settings|browser")
            return
        if kind is WindowKind.SETTINGS:
            window_id = self.session.open_settings()
        elif kind is WindowKind.BROWSER:
            window_id = self.session.open_browser()
        else:
            window_id = self.session.open_explorer()
        self._print(f"Opened {kind.value} in window {window_id[:8]}")

    def do_windows(self, arg: str) -> None:  # pylint: disable=unused-argument
        """windows -- show the taskbar (* focused, - minimized, + maximized)"""

        taskbar = self.session.wm.taskbar()
        if not taskbar:
            self._print("No open windows")
            return
        focused_id = self.session.wm.focused_id
        for index, window in enumerate(taskbar, start=1):
            flags = "".join(
                marker
                for marker, enabled in (
                    ("*", window.id == focused_id),
                    ("-", window.is_minimized),
                    ("+", window.is_maximized),
                )
                if enabled
            )
            self._print(f"{index:>2} {flags:3} {window.kind.value:8} z={window.z_index:<4} {window.title}")

    def do_focus(self, arg: str) -> None:
        """focus WINDOW -- bring a window to the front"""

        window = self._window_arg(arg, "focus WINDOW")
        if window:
            self.session.wm.focus(window.id)

    def do_min(self, arg: str) -> None:
        """min WINDOW -- minimize a window to the taskbar"""

        window = self._window_arg(arg, "min WINDOW")
        if window:
            self.session.wm.minimize(window.id)

    def do_max(self, arg: str) -> None:
        """max WINDOW -- toggle maximized layout"""

        window = self._window_arg(arg, "max WINDOW")
        if window:
            self.session.wm.toggle_maximize(window.id)

    def do_close(self, arg: str) -> None:
        """close WINDOW -- close a window"""

        window = self._window_arg(arg, "close WINDOW")
        if window:
            self.session.wm.close(window.id)

    def do_start(self, arg: str) -> None:  # pylint: disable=unused-argument
        """start -- toggle the start menu"""

        state = "open" if self.session.wm.toggle_start_menu() else "closed"
        self._print(f"Start menu {state}")

    def do_icons(self, arg: str) -> None:  # pylint: disable=unused-argument
        """icons -- list desktop icons"""

        for index, icon in enumerate(self.session.desktop_icons(), start=1):
            self._print(f"{index:>2} {icon.label} ({icon.kind.value})")

    def do_icon(self, arg: str) -> None:
        """icon N -- activate the Nth desktop icon, as a double-click would"""

        tokens = self._parse(arg)
        icons = self.session.desktop_icons()
        if not tokens or not tokens[0].isdigit() or not 1 <= int(tokens[0]) <= len(icons):
            self._print(f"Usage: icon N (1-{len(icons)})")
            return
        icon = icons[int(tokens[0]) - 1]
        window_id = self.session.activate(icon)
        self._print(f"Opened '{icon.label}' in window {window_id[:8]}")

    def do_exit(self, arg: str) -> bool:  # pylint: disable=unused-argument
        """exit -- leave the shell"""

        self._print("Bye")
        return True

    do_quit = do_exit
    do_EOF = do_exit
