"""Runtime wiring for the record store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import ShellConfig
from .services.principal_service import PrincipalService
from .services.record_service import RecordService
from .storage.database import build_engine, build_session_factory
from .telemetry import TelemetryCollector

logger = logging.getLogger(__name__)


@dataclass
class ShellRuntime:
    config: ShellConfig
    engine: Engine
    session_factory: sessionmaker
    telemetry: TelemetryCollector
    principal_service: PrincipalService
    record_service: RecordService

    @classmethod
    def bootstrap(cls, config: Optional[ShellConfig] = None, engine: Optional[Engine] = None) -> "ShellRuntime":
        cfg = config or ShellConfig.default()
        engine = engine or build_engine(cfg.database)
        session_factory = build_session_factory(engine)
        telemetry = TelemetryCollector(cfg.observability)

        principal_service = PrincipalService(config=cfg, telemetry=telemetry, session_factory=session_factory)
        record_service = RecordService(config=cfg, telemetry=telemetry, session_factory=session_factory)
        logger.debug("Record store bootstrapped on %s", cfg.database.dsn)

        return cls(
            config=cfg,
            engine=engine,
            session_factory=session_factory,
            telemetry=telemetry,
            principal_service=principal_service,
            record_service=record_service,
        )

    def shutdown(self) -> None:
        logger.debug(
            "Shutting down with %d metrics and %d events buffered",
            len(self.telemetry.metrics),
            len(self.telemetry.events),
        )
        self.telemetry.flush()
        self.engine.dispose()
