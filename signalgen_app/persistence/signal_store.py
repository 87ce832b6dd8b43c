"""SQLite signal persistence for history, settlement and audit."""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

import structlog

from ..data.models import GeneratedSignal, SignalDraft, SignalOutcome
from ..errors import PersistenceError
from ..utils.time import format_timestamp, parse_timestamp, utc_now
from .base import SignalStore, check_update_fields

logger = structlog.get_logger(__name__)


class SqliteSignalStore(SignalStore):
    """SQLite-based signal persistence layer."""

    def __init__(self, db_path: str = "signals.db", timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.logger = logger
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        if self.db_path.parent != Path("."):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS signals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    instrument_id INTEGER NOT NULL,
                    instrument_name TEXT NOT NULL,
                    strategy_type TEXT NOT NULL,
                    strategy_name TEXT NOT NULL,
                    entry_point TEXT NOT NULL,
                    predicted_signal TEXT NOT NULL,
                    reason TEXT NOT NULL,
                    win_probability TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    email_sent INTEGER DEFAULT 0,
                    outcome TEXT DEFAULT 'pending',
                    metadata TEXT
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_signals_instrument_id ON signals(instrument_id)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_signals_created_at ON signals(created_at)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_signals_outcome ON signals(outcome)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", db_path=str(self.db_path), error=str(e))
            raise
        finally:
            if conn:
                conn.close()

    def create(self, draft: SignalDraft) -> GeneratedSignal:
        """
        Store a new signal.

        Raises:
            PersistenceError: the insert failed
        """
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("""
                        INSERT INTO signals (
                            instrument_id, instrument_name, strategy_type, strategy_name,
                            entry_point, predicted_signal, reason, win_probability,
                            created_at, email_sent, outcome, metadata
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """, (
                        draft.instrument_id,
                        draft.instrument_name,
                        draft.strategy_type,
                        draft.strategy_name,
                        draft.entry_point,
                        draft.predicted_signal,
                        draft.reason,
                        draft.win_probability,
                        format_timestamp(draft.created_at),
                        int(draft.email_sent),
                        SignalOutcome(draft.outcome).value,
                        json.dumps(draft.metadata),
                    ))

                    conn.commit()
                    signal_id = cursor.lastrowid

            except (sqlite3.Error, TypeError, ValueError) as e:
                raise PersistenceError(
                    f"Failed to store signal: {e}",
                    operation="create",
                    target=str(self.db_path),
                    context={"instrument_id": draft.instrument_id}
                ) from e

        self.logger.info(
            "Signal stored",
            signal_id=signal_id,
            instrument_id=draft.instrument_id,
            predicted_signal=draft.predicted_signal
        )

        return GeneratedSignal.from_draft(signal_id, draft)

    def update(self, signal_id: int, fields: dict[str, Any]) -> Optional[GeneratedSignal]:
        """
        Apply a partial update to a stored signal.

        Returns:
            Updated signal, or None when no signal has this id
        """
        check_update_fields(fields)
        if not fields:
            return self.get(signal_id)

        columns = []
        values: list[Any] = []
        for name, value in fields.items():
            if name == "email_sent":
                value = int(bool(value))
            elif name == "outcome":
                value = SignalOutcome(value).value
            elif name == "metadata":
                value = json.dumps(value)
            columns.append(f"{name} = ?")
            values.append(value)

        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute(
                        f"UPDATE signals SET {', '.join(columns)} WHERE id = ?",
                        (*values, signal_id)
                    )
                    conn.commit()
                    updated = cursor.rowcount

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to update signal {signal_id}: {e}",
                    operation="update",
                    target=str(self.db_path)
                ) from e

        if not updated:
            return None

        return self.get(signal_id)

    def get(self, signal_id: int) -> Optional[GeneratedSignal]:
        """Get a signal by ID."""
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT * FROM signals WHERE id = ?
            """, (signal_id,)).fetchone()

        return self._row_to_signal(row) if row else None

    def list_recent(self, limit: int = 100) -> list[GeneratedSignal]:
        """Most recent signals first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM signals ORDER BY created_at DESC, id DESC LIMIT ?
            """, (limit,)).fetchall()

        return [self._row_to_signal(row) for row in rows]

    def list_by_instrument(self, instrument_id: int, limit: int = 100) -> list[GeneratedSignal]:
        """Most recent signals for one instrument."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM signals WHERE instrument_id = ?
                ORDER BY created_at DESC, id DESC LIMIT ?
            """, (instrument_id, limit)).fetchall()

        return [self._row_to_signal(row) for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get database statistics."""
        with self._get_connection() as conn:
            total_count = conn.execute("SELECT COUNT(*) FROM signals").fetchone()[0]

            outcome_counts = {}
            for row in conn.execute("""
                SELECT outcome, COUNT(*) as count FROM signals GROUP BY outcome
            """):
                outcome_counts[row[0]] = row[1]

            emailed = conn.execute(
                "SELECT COUNT(*) FROM signals WHERE email_sent = 1"
            ).fetchone()[0]

        return {
            "total_signals": total_count,
            "signals_by_outcome": outcome_counts,
            "emailed": emailed,
        }

    def cleanup_old_signals(self, older_than_days: int = 30) -> int:
        """Remove signals older than the given number of days."""
        cutoff = format_timestamp(utc_now() - timedelta(days=older_than_days))

        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("""
                    DELETE FROM signals WHERE created_at < ?
                """, (cutoff,))

                conn.commit()
                deleted_count = cursor.rowcount

        self.logger.info("Cleaned up old signals", deleted=deleted_count, older_than_days=older_than_days)
        return deleted_count

    def _row_to_signal(self, row: sqlite3.Row) -> GeneratedSignal:
        """Convert database row to GeneratedSignal."""
        return GeneratedSignal(
            id=row["id"],
            instrument_id=row["instrument_id"],
            instrument_name=row["instrument_name"],
            strategy_type=row["strategy_type"],
            strategy_name=row["strategy_name"],
            entry_point=row["entry_point"],
            predicted_signal=row["predicted_signal"],
            reason=row["reason"],
            win_probability=row["win_probability"],
            created_at=parse_timestamp(row["created_at"]),
            email_sent=bool(row["email_sent"]),
            outcome=SignalOutcome(row["outcome"]),
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
        )
