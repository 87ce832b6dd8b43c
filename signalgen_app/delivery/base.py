"""Base classes for signal notification and broadcast."""

from abc import ABC, abstractmethod
from typing import Any

import structlog

from ..data.models import GeneratedSignal

NEW_SIGNAL_EVENT = "new_signal"


class NotifySink(ABC):
    """Best-effort per-signal notification (e-mail, chat, ...)."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"signal.notify.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def notify(self, signal: GeneratedSignal) -> bool:
        """
        Notify about a persisted signal.

        Returns:
            True when the notification was delivered. A False return or a
            raised exception leaves the signal's email_sent flag unset.
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the notification channel is usable."""
        pass

    def _record(self, success: bool) -> None:
        if success:
            self._delivery_count += 1
        else:
            self._error_count += 1

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }


class BroadcastSink(ABC):
    """Fire-and-forget fan-out of engine events to subscribers."""

    @abstractmethod
    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        """Publish an event; no delivery guarantee, no backpressure."""
        pass
