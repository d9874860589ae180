"""
In-process Event Bus

Delivers committed contract events to subscribers (indexers, projections).
Events are published only after their transaction has committed, so a
subscriber never observes an event that was later rolled back.
"""

from collections import defaultdict
from typing import Callable

from fundme.kernel.events import Event
from fundme.kernel.logging import get_logger

logger = get_logger(__name__)


EventHandler = Callable[[Event], None]

# Subscribing to this key receives every event type
ALL_EVENTS = "*"


class EventBus:
    """
    Simple synchronous in-process bus

    Handlers are called in subscription order. A failing handler is
    logged and skipped; it cannot undo the committed transaction.
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        Register an event handler (can have multiple per event type)

        Args:
            event_type: Type of event to handle, or ALL_EVENTS
            handler: Function that processes the event
        """
        self._handlers[event_type].append(handler)
        logger.debug(
            "Event handler registered",
            event_type=event_type,
            total_handlers=len(self._handlers[event_type]),
        )

    def publish_event(self, event: Event) -> None:
        """Publish an event to all matching handlers"""
        handlers = self._handlers.get(event.event_type, []) + self._handlers.get(
            ALL_EVENTS, []
        )

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    event_type=event.event_type,
                    event_id=event.event_id,
                    tx_id=event.tx_id,
                    error=str(e),
                    exc_info=True,
                )

    def publish_events(self, events: list[Event]) -> None:
        """Publish multiple events in order"""
        for event in events:
            self.publish_event(event)

    def get_event_types(self) -> list[str]:
        """Get list of event types that have subscribers"""
        return list(self._handlers.keys())

    def clear(self) -> None:
        """Remove all subscribers (useful for testing)"""
        self._handlers.clear()
