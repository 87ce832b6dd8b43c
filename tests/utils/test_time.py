"""Tests for time utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from signalgen_app.utils.time import (
    cooldown_elapsed,
    format_local_time,
    format_timestamp,
    parse_timestamp,
    time_elapsed_seconds,
    utc_now,
)


class TestTimeUtilities:
    """Test time helper functions."""

    def test_utc_now_is_aware(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_time_elapsed_seconds(self):
        start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        end = start + timedelta(minutes=2, seconds=30)

        assert time_elapsed_seconds(start, end) == 150.0

    def test_time_elapsed_defaults_to_now(self):
        start = utc_now() - timedelta(seconds=10)
        assert time_elapsed_seconds(start) >= 10.0

    @pytest.mark.parametrize("elapsed_seconds,expected", [
        (0, False),
        (299, False),
        (300, True),
        (3600, True),
    ])
    def test_cooldown_elapsed(self, elapsed_seconds, expected):
        last = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        now = last + timedelta(seconds=elapsed_seconds)

        assert cooldown_elapsed(last, now, 5) is expected

    def test_cooldown_without_previous_signal(self):
        assert cooldown_elapsed(None, utc_now(), 5) is True

    def test_timestamp_round_trip(self):
        ts = datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert parse_timestamp(format_timestamp(ts)) == ts

    def test_parse_naive_timestamp_assumes_utc(self):
        parsed = parse_timestamp("2024-01-01T12:00:00")
        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("hour,minute,expected", [
        (12, 7, "3:07 PM"),
        (21, 0, "12:00 AM"),
        (9, 30, "12:30 PM"),
        (3, 5, "6:05 AM"),
    ])
    def test_format_local_time_nairobi(self, hour, minute, expected):
        ts = datetime(2024, 1, 1, hour, minute, tzinfo=timezone.utc)
        assert format_local_time(ts, "Africa/Nairobi") == expected
