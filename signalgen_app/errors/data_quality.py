"""
Data quality errors raised while ingesting ticks.

A data quality error always concerns a single tick or a single symbol's
digit window. The engine drops the tick and keeps consuming the feed.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Recoverable problem with one piece of market data."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingDataError(DataQualityError):
    """A tick payload lacks a required field (symbol or quote)."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class MalformedDataError(DataQualityError):
    """A price or payload is present but cannot be read as a decimal quote."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class InsufficientDataError(DataQualityError):
    """A digit window is shorter than the analyzer's minimum."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count
