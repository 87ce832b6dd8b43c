"""In-memory stores, seeded with the default instrument catalogue."""

import threading
from typing import Any, Iterable, Optional

from ..data.models import (
    GeneratedSignal,
    Instrument,
    SignalDraft,
    SignalOutcome,
    StrategyPerformanceRecord,
)
from .base import (
    InstrumentStore,
    PerformanceStore,
    SignalStore,
    check_update_fields,
)

DEFAULT_INSTRUMENTS = (
    Instrument(id=1, symbol="R_10", display_name="Volatility 10"),
    Instrument(id=2, symbol="R_25", display_name="Volatility 25"),
    Instrument(id=3, symbol="R_50", display_name="Volatility 50"),
    Instrument(id=4, symbol="R_75", display_name="Volatility 75"),
    Instrument(id=5, symbol="R_100", display_name="Volatility 100"),
)

DEFAULT_PERFORMANCE = (
    StrategyPerformanceRecord(4, "Digits", "Even/Odd", "68%", 100),
    StrategyPerformanceRecord(4, "Digits", "Over/Under", "75%", 100),
    StrategyPerformanceRecord(4, "Digits", "Matches/Differs", "62%", 100),
    StrategyPerformanceRecord(4, "Manual", "Candlestick", "70%", 100),
)


class InMemoryMarketCatalog(InstrumentStore, PerformanceStore):
    """Instruments and performance records held in process memory."""

    def __init__(
        self,
        instruments: Optional[Iterable[Instrument]] = None,
        performance: Optional[Iterable[StrategyPerformanceRecord]] = None
    ):
        self._instruments = list(DEFAULT_INSTRUMENTS if instruments is None else instruments)
        self._performance = list(DEFAULT_PERFORMANCE if performance is None else performance)
        self._lock = threading.Lock()

    def list_instruments(self) -> list[Instrument]:
        with self._lock:
            return list(self._instruments)

    def list_performance(self) -> list[StrategyPerformanceRecord]:
        with self._lock:
            return list(self._performance)

    def set_performance(self, records: Iterable[StrategyPerformanceRecord]) -> None:
        """Replace performance records, e.g. after an external recalculation."""
        with self._lock:
            self._performance = list(records)

    def add_instrument(self, instrument: Instrument) -> None:
        with self._lock:
            self._instruments.append(instrument)

    def find_by_symbol(self, symbol: str) -> Optional[Instrument]:
        with self._lock:
            return next((i for i in self._instruments if i.symbol == symbol), None)


class InMemorySignalStore(SignalStore):
    """Signal store backed by a dict; ids start at 1."""

    def __init__(self):
        self._signals: dict[int, GeneratedSignal] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, draft: SignalDraft) -> GeneratedSignal:
        with self._lock:
            signal = GeneratedSignal.from_draft(self._next_id, draft)
            self._signals[signal.id] = signal
            self._next_id += 1
            return signal

    def update(self, signal_id: int, fields: dict[str, Any]) -> Optional[GeneratedSignal]:
        check_update_fields(fields)
        with self._lock:
            signal = self._signals.get(signal_id)
            if signal is None:
                return None
            if "outcome" in fields:
                fields = {**fields, "outcome": SignalOutcome(fields["outcome"])}
            updated = signal.with_updates(**fields)
            self._signals[signal_id] = updated
            return updated

    def get(self, signal_id: int) -> Optional[GeneratedSignal]:
        with self._lock:
            return self._signals.get(signal_id)

    def list_recent(self, limit: int = 100) -> list[GeneratedSignal]:
        with self._lock:
            ordered = sorted(
                self._signals.values(),
                key=lambda s: (s.created_at, s.id),
                reverse=True
            )
        return ordered[:limit]

    def list_by_instrument(self, instrument_id: int, limit: int = 100) -> list[GeneratedSignal]:
        with self._lock:
            matching = [s for s in self._signals.values() if s.instrument_id == instrument_id]
        matching.sort(key=lambda s: (s.created_at, s.id), reverse=True)
        return matching[:limit]
