"""Tests for the error classification hierarchy."""

import pytest

from signalgen_app.config.validation import ValidationError
from signalgen_app.errors import (
    DataQualityError,
    DeliveryError,
    InsufficientDataError,
    MalformedDataError,
    MissingDataError,
    PersistenceError,
    SettingsValidationError,
    SystemFailureError,
)


class TestDataQualityErrors:
    """Test data quality error classes."""

    def test_data_quality_error_base(self):
        error = DataQualityError("Test error", context={"symbol": "R_10"})

        assert str(error) == "Test error"
        assert error.context == {"symbol": "R_10"}
        assert error.recoverable is True

    def test_missing_data_error(self):
        error = MissingDataError("No quote", data_type="quote")

        assert isinstance(error, DataQualityError)
        assert error.data_type == "quote"
        assert error.context == {}

    def test_malformed_data_error(self):
        error = MalformedDataError("Bad price", raw_data="12a", expected_format="decimal string")

        assert error.raw_data == "12a"
        assert error.expected_format == "decimal string"

    def test_insufficient_data_error(self):
        error = InsufficientDataError("Too few digits", required_count=5, available_count=3)

        assert error.required_count == 5
        assert error.available_count == 3
        assert error.recoverable is True


class TestSystemFailureErrors:
    """Test system failure error classes."""

    def test_persistence_error(self):
        error = PersistenceError("insert failed", operation="create", target="signals.db")

        assert isinstance(error, SystemFailureError)
        assert error.operation == "create"
        assert error.target == "signals.db"
        assert error.recoverable is False

    def test_delivery_error(self):
        error = DeliveryError("smtp down", delivery_method="email", signal_id=3)

        assert error.delivery_method == "email"
        assert error.signal_id == 3

    def test_settings_validation_error_carries_records(self):
        records = [ValidationError(field="max_signals", message="Must be a number between 1 and 10", value=0)]
        error = SettingsValidationError("Invalid generator settings", errors=records)

        assert error.errors == records
        assert error.recoverable is True

    def test_error_chaining(self):
        with pytest.raises(PersistenceError) as exc_info:
            try:
                raise OSError("disk full")
            except OSError as e:
                raise PersistenceError("store failed", operation="create") from e

        assert isinstance(exc_info.value.__cause__, OSError)
