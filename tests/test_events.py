"""Tests for the event channel."""

import pytest

from wayfinder.core import EventChannel, EventType


def test_listeners_called_in_registration_order():
    channel = EventChannel()
    calls = []
    channel.subscribe(lambda e: calls.append(("first", e.type)))
    channel.subscribe(lambda e: calls.append(("second", e.type)))

    channel.emit(EventType.STARTED)
    channel.emit(EventType.COMPLETED, journeys=0)

    assert calls == [
        ("first", EventType.STARTED),
        ("second", EventType.STARTED),
        ("first", EventType.COMPLETED),
        ("second", EventType.COMPLETED),
    ]


def test_failing_listener_does_not_block_others():
    """A listener that raises is logged and the rest still get the event."""
    channel = EventChannel()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    channel.subscribe(broken)
    channel.subscribe(received.append)

    event = channel.emit(EventType.PAGE_SCANNED, key="k", meaningful_count=3)

    assert received == [event]
    assert event.payload == {"key": "k", "meaningful_count": 3}


def test_unsubscribe():
    channel = EventChannel()
    received = []
    unsubscribe = channel.subscribe(received.append)

    channel.emit(EventType.STARTED)
    unsubscribe()
    channel.emit(EventType.COMPLETED)

    assert [e.type for e in received] == [EventType.STARTED]
    assert [e.type for e in channel.history] == [EventType.STARTED, EventType.COMPLETED]


@pytest.mark.asyncio
async def test_queue_view_is_fifo():
    channel = EventChannel()
    queue = channel.queue()

    channel.emit(EventType.STARTED)
    channel.emit(EventType.PAUSED)
    channel.emit(EventType.COMPLETED)

    types = [(await queue.get()).type for _ in range(3)]
    assert types == [EventType.STARTED, EventType.PAUSED, EventType.COMPLETED]
