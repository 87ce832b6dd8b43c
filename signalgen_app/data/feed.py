"""In-process tick source with a callback registry."""

import threading
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

TickCallback = Callable[[Any], None]


class TickSource:
    """
    Fan-out of raw tick payloads to subscribers.

    The upstream market-data client (reconnects, backoff) calls publish()
    for every tick it receives. Subscribers are invoked synchronously in
    subscription order; an exception in one subscriber is logged and does
    not reach the others or the publisher.
    """

    def __init__(self):
        self._subscribers: list[TickCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: TickCallback) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: TickCallback) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, payload: Any) -> None:
        """Deliver one tick payload to every subscriber."""
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(payload)
            except Exception as e:
                logger.error(
                    "Tick subscriber failed",
                    subscriber=getattr(callback, "__qualname__", repr(callback)),
                    error=str(e),
                    error_type=type(e).__name__
                )

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
