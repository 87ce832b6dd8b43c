"""Notification and broadcast sinks for generated signals."""

from .base import BroadcastSink, NotifySink
from .broadcast import BroadcastHub
from .email_delivery import EmailSignalNotifier

__all__ = ["BroadcastSink", "NotifySink", "BroadcastHub", "EmailSignalNotifier"]
