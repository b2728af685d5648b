from __future__ import annotations

import asyncio

import pytest

from account_service.domain.exceptions import SessionDeliveryError
from account_service.infrastructure.messaging.session_registry import InMemorySessionRegistry


def test_message_from_worker_thread_reaches_subscriber():
    registry = InMemorySessionRegistry()

    async def scenario() -> str:
        queue = registry.subscribe("sess-1")
        await asyncio.to_thread(registry.send_personal_message, session="sess-1", message="BalanceAdded")
        return await asyncio.wait_for(queue.get(), timeout=1)

    assert asyncio.run(scenario()) == "BalanceAdded"


def test_unknown_session_raises_delivery_error():
    registry = InMemorySessionRegistry()

    with pytest.raises(SessionDeliveryError):
        registry.send_personal_message(session="nobody", message="Hello")


def test_stale_unsubscribe_keeps_newer_connection():
    registry = InMemorySessionRegistry()

    async def scenario():
        old_queue = registry.subscribe("sess-1")
        new_queue = registry.subscribe("sess-1")
        registry.unsubscribe("sess-1", old_queue)
        assert registry.is_connected("sess-1")
        registry.unsubscribe("sess-1", new_queue)
        assert not registry.is_connected("sess-1")

    asyncio.run(scenario())


def test_closed_loop_drops_session():
    registry = InMemorySessionRegistry()

    async def scenario():
        registry.subscribe("sess-1")

    asyncio.run(scenario())

    with pytest.raises(SessionDeliveryError):
        registry.send_personal_message(session="sess-1", message="Hello")
    assert not registry.is_connected("sess-1")
