"""Command-line entry points: serve the record store or run the desktop shell."""

from __future__ import annotations

import argparse
import logging
from typing import Iterable, Optional

import uvicorn

from .clients.file_store import FileStoreClient
from .clients.store_client import StoreClient
from .config import ShellConfig
from .desktop.session import DesktopSession
from .shell import NovaShell

_LOGGER = logging.getLogger("nova_shell.cli")


def run_cli(argv: Optional[Iterable[str]] = None) -> None:
    config = ShellConfig.from_env()
    parser = argparse.ArgumentParser(description="NovaOS desktop shell and record store")
    parser.add_argument("--log-level", default=config.observability.log_level)
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the record store HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    serve.set_defaults(handler=_run_serve)

    shell = sub.add_parser("shell", help="Run the interactive desktop against a record store")
    shell.add_argument("--base-url", default=config.client.base_url, help="Record store REST endpoint")
    shell.add_argument("--timeout", type=float, default=config.client.timeout)
    shell.set_defaults(handler=_run_shell)

    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=args.log_level.upper())
    args.handler(args, config)


def build_session(base_url: str, timeout: float, config: ShellConfig) -> DesktopSession:
    transport = StoreClient(base_url, timeout=timeout)
    return DesktopSession(FileStoreClient(transport), config.desktop)


def _run_serve(args: argparse.Namespace, config: ShellConfig) -> None:
    _LOGGER.info("NovaOS record store on http://%s:%s (database=%s)", args.host, args.port, config.database.dsn)
    uvicorn.run("nova_shell.api.server:app", host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_shell(args: argparse.Namespace, config: ShellConfig) -> None:
    session = build_session(args.base_url, args.timeout, config)
    NovaShell(session).cmdloop()


if __name__ == "__main__":  # pragma: no cover
    run_cli()
