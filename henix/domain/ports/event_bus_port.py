"""
Event Bus Port

Architectural Intent:
- Where DeployFleet hands the events of finished attempts
- Subscribers registered for a base class also see its subclasses
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

from henix.domain.events.event_base import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, events: list[DomainEvent]) -> None: ...

    def subscribe(self, event_type: type, handler: EventHandler) -> None: ...
