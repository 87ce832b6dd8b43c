"""
System failure error classifications.

These represent failures of collaborators (signal store, notifier) or
rejected configuration. They are isolated per instrument or per request.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for collaborator and system-level failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class DeliveryError(SystemFailureError):
    """Signal notification or broadcast failures."""

    def __init__(self, message: str, delivery_method: Optional[str] = None,
                 signal_id: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.delivery_method = delivery_method
        self.signal_id = signal_id


class SettingsValidationError(SystemFailureError):
    """Generator settings rejected at the configuration boundary."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
        self.recoverable = True
