"""Event system for vidsplit.

Lets the UI layer observe a split run without the core knowing about
any particular widget: run state transitions, per-job completion and
preview boundary crossings are all delivered as events.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Core event types."""
    STATE_CHANGED = auto()
    JOB_COMPLETE = auto()
    OUTPUT_LISTED = auto()
    BOUNDARY_REACHED = auto()
    SEEK_REQUESTED = auto()


@dataclass
class Event:
    """Event data container.

    Attributes:
        type: Type of event
        timestamp: When the event occurred
        data: Event-specific data
        source: Component that generated the event
    """
    type: EventType
    timestamp: datetime
    data: Dict[str, Any]
    source: str


class EventEmitter:
    """Base event system for component communication."""

    def __init__(self) -> None:
        self._handlers: Dict[EventType, List[Callable[[Event], None]]] = {}
        self._error_handlers: List[Callable[[Exception], None]] = []

    def on(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        """Register an event handler.

        Args:
            event_type: Type of event to handle
            handler: Callback function for the event
        """
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        if event_type in self._handlers:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
            if not self._handlers[event_type]:
                del self._handlers[event_type]

    def on_error(self, handler: Callable[[Exception], None]) -> None:
        self._error_handlers.append(handler)

    def emit(self, event_type: EventType, data: Dict[str, Any], source: str) -> None:
        """Emit an event to registered handlers, in registration order.

        A failing handler does not stop delivery to the others; its
        exception goes to the error handlers (or the log).
        """
        event = Event(
            type=event_type,
            timestamp=datetime.now(),
            data=data,
            source=source
        )

        for handler in list(self._handlers.get(event_type, ())):
            try:
                handler(event)
            except Exception as e:
                self._handle_error(e)

    def _handle_error(self, error: Exception) -> None:
        if not self._error_handlers:
            logger.error("Event handler failed: %s", error, exc_info=error)
            return
        for handler in self._error_handlers:
            try:
                handler(error)
            except Exception:
                logger.exception("Event error handler failed")
