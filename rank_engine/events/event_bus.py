# rank_engine/events/event_bus.py
"""
Event bus for decoupled communication between the engine and its consumers
(dashboards, notifications, access-control caches).
"""
from typing import Dict, List, Callable, Any
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple synchronous event bus.
    Handlers run in the emitting thread, in subscription order.
    """

    _instance = None
    _handlers: Dict[str, List[Callable]] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._handlers = {}
        return cls._instance

    def subscribe(self, eventName: str, handler: Callable):
        """Subscribe handler to event."""
        if eventName not in self._handlers:
            self._handlers[eventName] = []

        self._handlers[eventName].append(handler)
        logger.debug(f"Handler {handler.__name__} subscribed to {eventName}")

    def unsubscribe(self, eventName: str, handler: Callable):
        """Unsubscribe handler from event."""
        if eventName in self._handlers and handler in self._handlers[eventName]:
            self._handlers[eventName].remove(handler)
            logger.debug(f"Handler {handler.__name__} unsubscribed from {eventName}")

    def emit(self, eventName: str, data: Dict[str, Any]):
        """Emit event to all subscribers. A failing handler never breaks the emitter."""
        if eventName not in self._handlers:
            return

        logger.debug(f"Emitting event {eventName} with data: {data}")

        for handler in list(self._handlers[eventName]):
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Error in handler {handler.__name__} for event {eventName}: {e}")

    def clear(self):
        """Clear all event handlers."""
        self._handlers.clear()


# Global event bus instance
eventBus = EventBus()


# Predefined events
class EngineEvents:
    """Standard credit & rank engine events."""

    SALE_RECORDED = "sale.recorded"
    SALE_REJECTED = "sale.rejected"
    CREDIT_APPLIED = "credit.applied"

    RANK_ACHIEVED = "rank.achieved"
    ROLE_CHANGED = "role.changed"
    RANK_DEFINITION_MISSING = "rank.definition_missing"
