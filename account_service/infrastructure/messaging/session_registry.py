from __future__ import annotations

import asyncio
import logging
from threading import Lock

from account_service.application.ports.notification_ports import SessionMessengerPort
from account_service.domain.exceptions import SessionDeliveryError


logger = logging.getLogger(__name__)


class InMemorySessionRegistry(SessionMessengerPort):
    """Live websocket sessions of this process, keyed by session handle.

    Use cases run in FastAPI's threadpool, so delivery goes through
    ``call_soon_threadsafe`` on the loop that owns the subscriber's queue.
    """

    def __init__(self):
        self._lock = Lock()
        self._subscribers: dict[str, tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = {}

    def subscribe(self, session: str) -> asyncio.Queue:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._subscribers[session] = (loop, queue)
        logger.info("session_registry: subscribed active=%s", len(self._subscribers))
        return queue

    def unsubscribe(self, session: str, queue: asyncio.Queue) -> None:
        with self._lock:
            current = self._subscribers.get(session)
            # a reconnect may already own the handle
            if current is not None and current[1] is queue:
                del self._subscribers[session]

    def is_connected(self, session: str) -> bool:
        with self._lock:
            return session in self._subscribers

    def send_personal_message(self, *, session: str, message: str) -> None:
        with self._lock:
            subscriber = self._subscribers.get(session)
        if subscriber is None:
            raise SessionDeliveryError("Session is not connected.")

        loop, queue = subscriber
        try:
            loop.call_soon_threadsafe(queue.put_nowait, message)
        except RuntimeError as exc:
            # loop already closed
            self.unsubscribe(session, queue)
            raise SessionDeliveryError("Session is no longer connected.") from exc
