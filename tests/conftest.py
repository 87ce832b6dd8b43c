"""Pytest configuration and shared fixtures."""

import pytest
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from signalgen_app.config.defaults import GeneratorParams
from signalgen_app.data.history import RollingDigitHistory
from signalgen_app.data.models import GeneratedSignal, Instrument, StrategyPerformanceRecord
from signalgen_app.delivery.base import NotifySink
from signalgen_app.delivery.broadcast import BroadcastHub
from signalgen_app.persistence.memory import InMemoryMarketCatalog, InMemorySignalStore
from signalgen_app.signals.scheduler import SignalScheduler


class FakeClock:
    """Manually advanced clock for cooldown tests."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> datetime:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
        return self.now


class RecordingNotifier(NotifySink):
    """Notifier that records signals and returns a configurable result."""

    def __init__(self, result: bool = True, raises: bool = False):
        super().__init__("recording")
        self.result = result
        self.raises = raises
        self.notified: List[GeneratedSignal] = []
        self._lock = threading.Lock()

    def notify(self, signal: GeneratedSignal) -> bool:
        with self._lock:
            self.notified.append(signal)
        if self.raises:
            raise RuntimeError("smtp unavailable")
        self._record(self.result)
        return self.result

    def health_check(self) -> bool:
        return True


class RecordingSubscriber:
    """Broadcast subscriber collecting (event_type, payload) pairs."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self._lock = threading.Lock()

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self.events.append((event_type, payload))


def feed_digits(history: RollingDigitHistory, symbol: str, digits: List[int]) -> None:
    """Observe one synthetic price per digit."""
    for digit in digits:
        history.observe(symbol, f"1234.5{digit}")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def instruments() -> List[Instrument]:
    return [
        Instrument(id=1, symbol="R_10", display_name="Volatility 10"),
        Instrument(id=2, symbol="R_25", display_name="Volatility 25"),
        Instrument(id=3, symbol="R_50", display_name="Volatility 50"),
    ]


@pytest.fixture
def even_odd_performance(instruments) -> List[StrategyPerformanceRecord]:
    """One Even/Odd record per instrument."""
    return [
        StrategyPerformanceRecord(i.id, "Digits", "Even/Odd", "68%", 100)
        for i in instruments
    ]


@pytest.fixture
def catalog(instruments, even_odd_performance) -> InMemoryMarketCatalog:
    return InMemoryMarketCatalog(instruments, even_odd_performance)


@pytest.fixture
def signal_store() -> InMemorySignalStore:
    return InMemorySignalStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub()


@pytest.fixture
def subscriber(hub) -> RecordingSubscriber:
    recorder = RecordingSubscriber()
    hub.subscribe(recorder)
    return recorder


@pytest.fixture
def history() -> RollingDigitHistory:
    return RollingDigitHistory()


@pytest.fixture
def scheduler(catalog, signal_store, notifier, hub, history, fake_clock) -> SignalScheduler:
    """Scheduler wired to in-memory collaborators and a fake clock."""
    sched = SignalScheduler(
        instrument_store=catalog,
        performance_store=catalog,
        signal_store=signal_store,
        notifier=notifier,
        broadcaster=hub,
        history=history,
        settings=GeneratorParams(max_signals=5, interval_minutes=5, entry_after_consecutive_count=3),
        clock=fake_clock
    )
    yield sched
    sched.stop()


@pytest.fixture
def feed():
    """Helper that observes one synthetic price per digit."""
    return feed_digits


@pytest.fixture
def make_notifier():
    """Factory for recording notifiers with a chosen outcome."""
    return RecordingNotifier


@pytest.fixture
def make_subscriber():
    return RecordingSubscriber
