from __future__ import annotations

import io

import pytest

from nova_shell.desktop import DesktopSession
from nova_shell.shell import NovaShell


@pytest.fixture
def shell(file_store):
    return NovaShell(DesktopSession(file_store), stdout=io.StringIO())


def _run(shell: NovaShell, *lines: str) -> str:
    shell.stdout.seek(0)
    shell.stdout.truncate()
    for line in lines:
        stop = shell.onecmd(line)
        shell.postcmd(stop, line)
    return shell.stdout.getvalue()


def test_register_and_login(shell, fake_store):
    assert "Welcome, alice (id 1)" in _run(shell, "register alice pw1")
    _run(shell, "logout")
    assert "Invalid credentials" in _run(shell, "login alice wrong")
    assert "Signed in as alice" in _run(shell, "login alice pw1")


def test_file_commands_require_sign_in(shell):
    assert "Sign in first" in _run(shell, "new a.txt")


def test_new_ls_and_rm(shell):
    _run(shell, "register alice pw1")
    output = _run(shell, "new a.txt --content hi", "new docs --folder", "ls")
    assert "Created file 'a.txt' (id 1)" in output
    assert "Created folder 'docs' (id 2)" in output
    assert "   1 file   a.txt" in output
    assert "   2 folder docs" in output

    assert "Deleted record 1" in _run(shell, "rm 1")
    assert "a.txt" not in _run(shell, "ls")


def test_save_through_taskbar_index(shell, fake_store):
    _run(shell, "register alice pw1", "new a.txt --content hi")
    output = _run(shell, "save 1 hello --name b.txt")
    assert "[info] Saved b.txt" in output
    assert fake_store.rows[1].content == "hello"
    assert fake_store.rows[1].name == "b.txt"


def test_store_outage_surfaces_as_notice(shell, fake_store):
    _run(shell, "register alice pw1")
    fake_store.offline = True
    assert "[error] Could not create a.txt" in _run(shell, "new a.txt")


def test_window_commands(shell):
    _run(shell, "register alice pw1")
    _run(shell, "app explorer", "app browser")
    listing = _run(shell, "windows")
    assert "explorer" in listing and "browser" in listing
    assert listing.splitlines()[1].split()[1] == "*"

    _run(shell, "min 2", "max 1")
    listing = _run(shell, "windows").splitlines()
    assert listing[0].split()[1] == "+"
    assert listing[1].split()[1] == "-"

    _run(shell, "close 1", "close 1")
    assert "No open windows" in _run(shell, "windows")


def test_start_menu_and_icons(shell):
    assert "Start menu open" in _run(shell, "start")
    assert "Start menu closed" in _run(shell, "start")
    assert "Browser (browser)" in _run(shell, "icons")


def test_unknown_window_is_reported(shell):
    assert "No window matches 'zz'" in _run(shell, "focus zz")


def test_exit_stops_loop(shell):
    assert shell.onecmd("exit") is True


def test_icon_command_activates_desktop_icon(shell):
    _run(shell, "register alice pw1", "new a.txt --content hi")
    _run(shell, "close 1")
    assert "Opened 'Browser'" in _run(shell, "icon 3")
    assert "Opened 'a.txt'" in _run(shell, "icon 4")
    focused = shell.session.wm.focused()
    assert focused.payload.record.content == "hi"
    assert "Usage: icon N (1-4)" in _run(shell, "icon 9")


def test_login_while_signed_in_replaces_desktop(shell, fake_store):
    _run(shell, "register bob pw1", "new bob.txt")
    fake_store.register("alice", "pw2")
    assert "Signed in as alice" in _run(shell, "login alice pw2")
    assert "No open windows" in _run(shell, "windows")
    assert "No files" in _run(shell, "ls")
