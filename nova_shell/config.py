"""Configuration primitives for the NovaOS shell and its record store."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


@dataclass
class DatabaseConfig:
    dsn: str
    pool_size: int = 10
    echo_sql: bool = False


@dataclass
class ApiConfig:
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class ClientConfig:
    base_url: str = "http://localhost:3000"
    timeout: float = 5.0


@dataclass
class DesktopConfig:
    taskbar_height: int = 48
    default_width: int = 800
    default_height: int = 500
    open_z_step: int = 10
    viewport_width: int = 1920
    viewport_height: int = 1080
    notice_limit: int = 50


@dataclass
class ObservabilityConfig:
    log_level: str = "INFO"


@dataclass
class ShellConfig:
    database: DatabaseConfig
    api: ApiConfig
    client: ClientConfig
    desktop: DesktopConfig
    observability: ObservabilityConfig

    @staticmethod
    def default() -> "ShellConfig":
        return ShellConfig(
            database=DatabaseConfig(dsn="sqlite:///nova_shell.db"),
            api=ApiConfig(),
            client=ClientConfig(),
            desktop=DesktopConfig(),
            observability=ObservabilityConfig(),
        )

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "ShellConfig":
        env = os.environ if environ is None else environ
        cfg = ShellConfig.default()
        dsn = env.get("NOVA_SHELL_DATABASE_URL")
        if dsn:
            cfg.database.dsn = dsn
        origins = [origin.strip() for origin in env.get("NOVA_SHELL_CORS_ORIGINS", "").split(",") if origin.strip()]
        if origins:
            cfg.api.cors_origins = origins
        base_url = env.get("NOVA_SHELL_BASE_URL")
        if base_url:
            cfg.client.base_url = base_url
        log_level = env.get("NOVA_SHELL_LOG_LEVEL")
        if log_level:
            cfg.observability.log_level = log_level.upper()
        return cfg
