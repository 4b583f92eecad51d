"""Tiny pub/sub bus used for desktop lifecycle notifications."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Dict, List


@dataclass
class MessageEnvelope:
    topic: str
    payload: Dict[str, Any]


class InMemoryBus:
    """Synchronous in-process bus; handlers run inside ``publish``."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[Callable[[MessageEnvelope], None]]] = defaultdict(list)

    def publish(self, envelope: MessageEnvelope) -> None:
        for callback in list(self._subscribers[envelope.topic]):
            callback(envelope)

    def subscribe(self, topic: str, handler: Callable[[MessageEnvelope], None]) -> None:
        self._subscribers[topic].append(handler)
