"""Base class for store services."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker

from ..config import ShellConfig
from ..telemetry import TelemetryCollector


@dataclass
class BaseService:
    config: ShellConfig
    telemetry: TelemetryCollector
    session_factory: sessionmaker

    def emit_metric(self, name: str, value: float, **labels: str) -> None:
        self.telemetry.emit_metric(name, value, labels)

    def emit_event(self, message: str, **attrs: str) -> None:
        self.telemetry.emit_event(message, attrs)
