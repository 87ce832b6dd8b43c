"""Tests for the SQLite signal persistence layer."""

import os
import shutil
import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from signalgen_app.data.models import GeneratedSignal, SignalDraft, SignalOutcome
from signalgen_app.errors import PersistenceError
from signalgen_app.persistence.signal_store import SqliteSignalStore


def make_draft(instrument_id=4, created_at=None, **overrides):
    values = dict(
        instrument_id=instrument_id,
        instrument_name="Volatility 75",
        strategy_type="Digits",
        strategy_name="Even/Odd",
        entry_point="After 3 consecutive even digits",
        predicted_signal="ODD",
        reason="After 5 consecutive even digits, probability of an odd digit is higher based on market patterns.",
        win_probability="68%",
        created_at=created_at or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        metadata={"symbol": "R_75", "run_length": 5},
    )
    values.update(overrides)
    return SignalDraft(**values)


class TestSqliteSignalStore:
    """Test SqliteSignalStore class."""

    def setup_method(self):
        """Setup test database."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "test_signals.db")
        self.store = SqliteSignalStore(self.db_path)

    def teardown_method(self):
        """Cleanup test database."""
        shutil.rmtree(self.temp_dir)

    def test_init_database(self):
        """Test database initialization."""
        assert Path(self.db_path).exists()

        with self.store._get_connection() as conn:
            cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = [row[0] for row in cursor.fetchall()]
            assert "signals" in tables

    def test_creates_parent_directory(self):
        nested = os.path.join(self.temp_dir, "nested", "dir", "signals.db")
        SqliteSignalStore(nested)
        assert Path(nested).exists()

    def test_create_assigns_ids(self):
        """Test storing signals returns increasing ids."""
        first = self.store.create(make_draft())
        second = self.store.create(make_draft())

        assert isinstance(first, GeneratedSignal)
        assert first.id > 0
        assert second.id > first.id
        assert first.email_sent is False
        assert first.outcome == SignalOutcome.PENDING

    def test_create_and_get_round_trip(self):
        created = self.store.create(make_draft())

        loaded = self.store.get(created.id)

        assert loaded == created
        assert loaded.created_at.tzinfo is not None
        assert loaded.metadata == {"symbol": "R_75", "run_length": 5}

    def test_get_missing(self):
        assert self.store.get(999) is None

    def test_update_email_sent(self):
        created = self.store.create(make_draft())

        updated = self.store.update(created.id, {"email_sent": True})

        assert updated.email_sent is True
        assert self.store.get(created.id).email_sent is True

    def test_update_outcome(self):
        """Test settling a signal."""
        created = self.store.create(make_draft())

        updated = self.store.update(created.id, {"outcome": "win"})

        assert updated.outcome == SignalOutcome.WIN

    def test_update_missing_signal(self):
        assert self.store.update(999, {"email_sent": True}) is None

    def test_update_rejects_immutable_fields(self):
        created = self.store.create(make_draft())

        with pytest.raises(ValueError):
            self.store.update(created.id, {"predicted_signal": "EVEN"})

    def test_update_rejects_unknown_outcome(self):
        created = self.store.create(make_draft())

        with pytest.raises(ValueError):
            self.store.update(created.id, {"outcome": "draw"})

    def test_empty_update_returns_current(self):
        created = self.store.create(make_draft())
        assert self.store.update(created.id, {}) == created

    def test_list_recent_newest_first(self):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for minutes in [0, 10, 5]:
            self.store.create(make_draft(created_at=base + timedelta(minutes=minutes)))

        recent = self.store.list_recent(limit=2)

        assert [s.created_at for s in recent] == [base + timedelta(minutes=10), base + timedelta(minutes=5)]

    def test_list_by_instrument(self):
        self.store.create(make_draft(instrument_id=1))
        self.store.create(make_draft(instrument_id=2))
        self.store.create(make_draft(instrument_id=1))

        signals = self.store.list_by_instrument(1)

        assert len(signals) == 2
        assert all(s.instrument_id == 1 for s in signals)

    def test_get_stats(self):
        first = self.store.create(make_draft())
        self.store.create(make_draft())
        self.store.update(first.id, {"email_sent": True, "outcome": "loss"})

        stats = self.store.get_stats()

        assert stats["total_signals"] == 2
        assert stats["signals_by_outcome"] == {"loss": 1, "pending": 1}
        assert stats["emailed"] == 1

    def test_cleanup_old_signals(self):
        old = datetime.now(timezone.utc) - timedelta(days=40)
        self.store.create(make_draft(created_at=old))
        self.store.create(make_draft(created_at=datetime.now(timezone.utc)))

        deleted = self.store.cleanup_old_signals(older_than_days=30)

        assert deleted == 1
        assert self.store.get_stats()["total_signals"] == 1

    def test_create_wraps_database_errors(self):
        """Test sqlite failures surface as PersistenceError."""
        with patch.object(self.store, "_get_connection", side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(PersistenceError) as exc_info:
                self.store.create(make_draft())

        assert exc_info.value.operation == "create"
        assert exc_info.value.target == self.db_path
        assert exc_info.value.recoverable is False

    def test_create_rejects_unserializable_metadata(self):
        with pytest.raises(PersistenceError):
            self.store.create(make_draft(metadata={"bad": object()}))
