"""In-process telemetry sink for store services."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List

from .config import ObservabilityConfig
from .models import ObservabilityEvent

logger = logging.getLogger(__name__)


@dataclass
class TelemetryCollector:
    config: ObservabilityConfig
    metrics: List[Dict[str, float]] = field(default_factory=list)
    events: List[ObservabilityEvent] = field(default_factory=list)

    def emit_metric(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        payload = {
            "name": name,
            "value": value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(labels or {}),
        }
        self.metrics.append(payload)

    def emit_event(self, message: str, attributes: Dict[str, str] | None = None) -> None:
        self.events.append(ObservabilityEvent(event_type="custom", message=message, attributes=attributes))
        logger.debug("telemetry event %s %s", message, attributes or {})

    def events_named(self, message: str) -> List[ObservabilityEvent]:
        return [event for event in self.events if event.message == message]

    def flush(self) -> None:
        self.metrics.clear()
        self.events.clear()
