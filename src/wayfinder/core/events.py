"""Lifecycle events emitted by the exploration engine."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..utils import log


class EventType(str, Enum):
    STARTED = "started"
    PAGE_SCANNED = "page_scanned"
    JOURNEY_FOUND = "journey_found"
    COMPLETED = "completed"
    PAUSED = "paused"
    ERROR = "error"


@dataclass
class ExplorationEvent:
    """A single engine event with its payload."""
    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


Listener = Callable[[ExplorationEvent], Any]


class EventChannel:
    """
    Delivers events FIFO to listeners in registration order.

    A listener that raises is logged and skipped; the others still receive
    the event. An optional asyncio.Queue gives a single consumer a pull view.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._queue: Optional[asyncio.Queue] = None
        self.history: List[ExplorationEvent] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback.

        Returns:
            A function that removes the callback again
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def queue(self) -> asyncio.Queue:
        """Return the queue view, creating it on first use."""
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue

    def emit(self, event_type: EventType, **payload: Any) -> ExplorationEvent:
        event = ExplorationEvent(type=event_type, payload=payload)
        self.history.append(event)
        log.debug(f"Event {event_type.value}: {list(payload.keys())}")

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                log.error(f"Event listener {getattr(listener, '__name__', listener)} failed: {e}")

        if self._queue is not None:
            self._queue.put_nowait(event)

        return event
