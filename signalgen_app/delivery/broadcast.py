"""In-process broadcast hub."""

import threading
from typing import Any, Callable

import structlog

from .base import BroadcastSink

logger = structlog.get_logger(__name__)

Subscriber = Callable[[str, dict[str, Any]], None]


class BroadcastHub(BroadcastSink):
    """
    Callback registry implementing BroadcastSink.

    Subscribers receive (event_type, payload) in subscription order. A
    failing subscriber is logged and skipped; publish() never raises.
    """

    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()
        self._published = 0

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
            self._published += 1

        for callback in subscribers:
            try:
                callback(event_type, payload)
            except Exception as e:
                logger.warning(
                    "Broadcast subscriber failed",
                    event_type=event_type,
                    error=str(e),
                    error_type=type(e).__name__
                )

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "subscribers": len(self._subscribers),
                "published": self._published,
            }
