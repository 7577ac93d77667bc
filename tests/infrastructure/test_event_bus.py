"""Tests for the in-memory EventBus."""

import pytest
from henix.domain.entities.deployment_attempt import (
    AttemptFailedEvent,
    AttemptSucceededEvent,
)
from henix.domain.events.event_base import DomainEvent
from henix.infrastructure.event_bus import EventBus


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_to_subscriber(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(AttemptSucceededEvent, handler)
        event = AttemptSucceededEvent(aggregate_id="web", host="10.0.0.1", slot_path="/etc/henix/x")
        await bus.publish([event])
        assert received == [event]

    @pytest.mark.asyncio
    async def test_only_matching_type(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(AttemptFailedEvent, handler)
        await bus.publish([AttemptSucceededEvent(aggregate_id="web")])
        assert received == []

    @pytest.mark.asyncio
    async def test_base_class_receives_everything(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event.event_type)

        bus.subscribe(DomainEvent, handler)
        await bus.publish([
            AttemptSucceededEvent(aggregate_id="web"),
            AttemptFailedEvent(aggregate_id="db", kind="build_failed", message="x"),
        ])
        assert received == ["AttemptSucceededEvent", "AttemptFailedEvent"]

    @pytest.mark.asyncio
    async def test_multiple_handlers(self):
        bus = EventBus()
        calls = []

        async def first(event):
            calls.append("first")

        async def second(event):
            calls.append("second")

        bus.subscribe(AttemptSucceededEvent, first)
        bus.subscribe(AttemptSucceededEvent, second)
        await bus.publish([AttemptSucceededEvent(aggregate_id="web")])
        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_publish_empty(self):
        await EventBus().publish([])

    def test_handlers_for_walks_mro(self):
        bus = EventBus()

        async def specific(event):
            pass

        async def catch_all(event):
            pass

        bus.subscribe(AttemptFailedEvent, specific)
        bus.subscribe(DomainEvent, catch_all)
        assert bus.handlers_for(AttemptFailedEvent) == [specific, catch_all]
        assert bus.handlers_for(AttemptSucceededEvent) == [catch_all]


class TestDomainEvent:
    def test_to_dict_includes_fields(self):
        event = AttemptFailedEvent(
            aggregate_id="db", host="10.0.0.2", kind="build_failed", message="exit 1"
        )
        data = event.to_dict()
        assert data["event_type"] == "AttemptFailedEvent"
        assert data["aggregate_id"] == "db"
        assert data["host"] == "10.0.0.2"
        assert data["kind"] == "build_failed"
        assert "occurred_at" in data
