"""
Error classification system for the signal generation engine.

Data quality errors are recoverable and scoped to a single tick or
instrument; system failures come from collaborators (stores, notifiers).
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
    InsufficientDataError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    DeliveryError,
    SettingsValidationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    "InsufficientDataError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "DeliveryError",
    "SettingsValidationError",
]
