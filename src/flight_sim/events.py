# MIT License (see LICENSE)
"""
Typed publish/subscribe bus for simulation events.

Handlers are keyed by event class and run synchronously on the tick thread,
in subscription order. A failing handler is logged and skipped so one bad
listener cannot halt the loop.
"""
from __future__ import annotations
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickCompleted:
    tick: int
    time: float
    entity_count: int


@dataclass(frozen=True)
class EntityRemoved:
    identity: uuid.UUID


@dataclass(frozen=True)
class StageActivated:
    vessel_id: str
    removed: tuple[uuid.UUID, ...]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Any) -> int:
        """Deliver `event` to its subscribers. Returns the number of handlers that succeeded."""
        delivered = 0
        for handler in list(self._handlers.get(type(event), ())):
            try:
                handler(event)
            except Exception:
                logger.exception("event handler %r failed on %s", handler, type(event).__name__)
            else:
                delivered += 1
        return delivered
