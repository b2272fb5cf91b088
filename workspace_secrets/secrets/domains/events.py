"""Synchronous in-process event dispatch."""
import logging
from typing import Any, Callable, Dict, List, Type

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventService:
    """Dispatches published events to handlers subscribed to the event's type."""

    def __init__(self):
        self._handlers: Dict[Type, List[Handler]] = {}

    def subscribe(self, handler: Handler, event_type: Type) -> None:
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, handler: Handler, event_type: Type) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Any) -> None:
        """
        Deliver an event to every handler registered for its type or a base class of it.

        Handler errors are logged and never propagate to the publisher.
        """
        handlers = []
        for event_type in type(event).__mro__:
            for handler in self._handlers.get(event_type, []):
                if handler not in handlers:
                    handlers.append(handler)

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed for {type(event).__name__}")
