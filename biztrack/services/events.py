"""
Domain events

A minimal in-process publish/subscribe registry. Handlers run synchronously
inside the publisher's session and transaction.
"""
from collections import defaultdict
from typing import Callable, Dict, List
import logging

logger = logging.getLogger(__name__)

PURCHASE_RECEIVED = "purchase.received"
PURCHASE_CANCELLED = "purchase.cancelled"


class EventBus:
    """Handlers keyed by event name"""

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = defaultdict(list)

    def subscribe(self, event: str, handler: Callable) -> Callable:
        if handler not in self._handlers[event]:
            self._handlers[event].append(handler)
        return handler

    def unsubscribe(self, event: str, handler: Callable):
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def handlers(self, event: str) -> List[Callable]:
        return list(self._handlers[event])

    def publish(self, event: str, db, **payload) -> int:
        """Call every handler for the event; errors propagate to the publisher"""
        handlers = self.handlers(event)
        logger.debug(f"Publishing {event} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(db, **payload)
        return len(handlers)


event_bus = EventBus()


def subscribe(event: str):
    """Decorator registering a function on the global bus"""
    def decorator(handler: Callable) -> Callable:
        return event_bus.subscribe(event, handler)
    return decorator
