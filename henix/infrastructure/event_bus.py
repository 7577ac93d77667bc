"""
Event Bus Infrastructure

Architectural Intent:
- In-process EventBusPort; handlers are awaited one after another in
  subscription order
- Dispatch walks the event's MRO, so subscribing to DomainEvent receives
  every attempt event
"""

import logging
from collections import defaultdict

from henix.domain.events.event_base import DomainEvent
from henix.domain.ports.event_bus_port import EventHandler

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._subscriptions: defaultdict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        self._subscriptions[event_type].append(handler)

    def handlers_for(self, event_cls: type) -> list[EventHandler]:
        return [
            handler
            for klass in event_cls.__mro__
            for handler in self._subscriptions.get(klass, ())
        ]

    async def publish(self, events: list[DomainEvent]) -> None:
        for event in events:
            logger.debug("%s for %s", event.event_type, event.aggregate_id)
            for handler in self.handlers_for(type(event)):
                await handler(event)
