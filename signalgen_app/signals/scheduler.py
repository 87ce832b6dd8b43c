"""
Periodic signal generation scheduler.

One timer thread drives generation cycles every `interval_minutes`. A cycle
scans instruments in order, picks each instrument's best strategy, runs the
pattern analyzer against the instrument's digit window, and emits at most
`max_signals` signals. Emissions (persist, notify, broadcast) run concurrently
on a thread pool in rounds; when some fail, the scan resumes to fill the
remaining slots. The cycle returns once all emissions have settled.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from ..config.defaults import GeneratorParams, HistoryParams
from ..data.history import RollingDigitHistory
from ..data.models import (
    GeneratedSignal,
    Instrument,
    SignalCandidate,
    SignalDraft,
    StrategyPerformanceRecord,
)
from ..delivery.base import NEW_SIGNAL_EVENT, BroadcastSink, NotifySink
from ..errors import InsufficientDataError
from ..logging.config import get_logger, get_scheduler_logger, log_cycle_decision
from ..persistence.base import InstrumentStore, PerformanceStore, SignalStore
from ..utils.time import cooldown_elapsed, utc_now
from .analyzer import analyze
from .strategy import StrategyCatalog

logger = get_logger(__name__)
scheduler_logger = get_scheduler_logger(__name__)

Analyzer = Callable[..., Optional[SignalCandidate]]


class SchedulerState(str, Enum):
    """Scheduler lifecycle."""
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class _Emission:
    instrument: Instrument
    record: StrategyPerformanceRecord
    draft: SignalDraft


class SignalScheduler:
    """
    Orchestrates periodic generation cycles.

    Settings changes through set_options() apply to cycles started after
    the next start(); callers validate settings before passing them in.
    start() while running restarts the timer. start() and stop() are
    serialised; stop() prevents further cycles but does not cancel one
    already in progress. Cycles never overlap.
    """

    def __init__(
        self,
        instrument_store: InstrumentStore,
        performance_store: PerformanceStore,
        signal_store: SignalStore,
        notifier: NotifySink,
        broadcaster: BroadcastSink,
        history: RollingDigitHistory,
        settings: Optional[GeneratorParams] = None,
        history_config: Optional[HistoryParams] = None,
        analyzer: Analyzer = analyze,
        clock: Callable[[], datetime] = utc_now,
        max_workers: Optional[int] = None
    ):
        self.instrument_store = instrument_store
        self.performance_store = performance_store
        self.signal_store = signal_store
        self.notifier = notifier
        self.broadcaster = broadcaster
        self.history = history
        self.history_config = history_config or history.config
        self.analyzer = analyzer
        self.clock = clock
        self.max_workers = max_workers
        self.logger = logger

        self._settings = settings or GeneratorParams()
        self._settings_lock = threading.Lock()

        self._last_signal_time: dict[str, datetime] = {}
        self._last_signal_lock = threading.Lock()

        self._command_lock = threading.Lock()
        self._state = SchedulerState.STOPPED
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._cycle_lock = threading.Lock()
        self._cycle_count = 0

    # -- settings -----------------------------------------------------------

    def get_options(self) -> GeneratorParams:
        with self._settings_lock:
            return self._settings

    def set_options(self, **changes: Any) -> GeneratorParams:
        """Merge changes into the current settings without validation."""
        with self._settings_lock:
            self._settings = replace(self._settings, **changes)
            settings = self._settings

        self.logger.info("Signal generator options updated", **asdict(settings))
        return settings

    # -- lifecycle ----------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    def start(self) -> None:
        """Start (or restart) the periodic timer with the current settings."""
        with self._command_lock:
            self._halt_timer()

            interval_seconds = self.get_options().interval_minutes * 60
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_timer,
                args=(stop_event, interval_seconds),
                name="signal-scheduler",
                daemon=True
            )
            self._stop_event = stop_event
            self._thread = thread
            self._state = SchedulerState.RUNNING
            thread.start()

        self.logger.info(
            "Signal generator started",
            interval_minutes=interval_seconds / 60
        )

    def stop(self) -> None:
        """Prevent further cycles. Idempotent."""
        with self._command_lock:
            was_running = self._halt_timer()
            self._state = SchedulerState.STOPPED

        if was_running:
            self.logger.info("Signal generator stopped")

    def _halt_timer(self) -> bool:
        if self._stop_event is None:
            return False
        self._stop_event.set()
        self._stop_event = None
        self._thread = None
        return True

    def _run_timer(self, stop_event: threading.Event, interval_seconds: float) -> None:
        # Each timer owns its event; a later start() never revives this loop.
        while not stop_event.wait(interval_seconds):
            try:
                self.run_cycle()
            except Exception as e:
                self.logger.error(
                    "Error in signal generation interval",
                    error=str(e),
                    error_type=type(e).__name__
                )

    # -- cycle --------------------------------------------------------------

    def run_cycle(self, now: Optional[datetime] = None) -> list[GeneratedSignal]:
        """
        Run one generation cycle synchronously.

        Cycles are serialised: a call made while another cycle is in progress
        (timer or caller) waits for it, then sees its cooldown updates.

        Returns:
            Signals successfully persisted during this cycle
        """
        with self._cycle_lock:
            return self._run_cycle(now or self.clock())

    def _run_cycle(self, now: datetime) -> list[GeneratedSignal]:
        settings = self.get_options()

        try:
            instruments = self.instrument_store.list_instruments()
            catalog = StrategyCatalog(self.performance_store.list_performance())
        except Exception as e:
            self.logger.error(
                "Failed to load cycle inputs",
                error=str(e),
                error_type=type(e).__name__
            )
            return []

        if not instruments:
            self.logger.info("No instruments found, skipping signal generation")
            return []

        self._cycle_count += 1
        pending = iter(instruments)
        emitted: list[GeneratedSignal] = []
        candidates = 0

        # Failed emissions free their slot for instruments later in the scan.
        while len(emitted) < settings.max_signals:
            limit = settings.max_signals - len(emitted)
            emissions = self._plan_emissions(pending, catalog, limit, settings, now)
            if not emissions:
                break
            candidates += len(emissions)
            emitted.extend(self._execute_emissions(emissions, now))

        self.logger.info(
            "Signal generation cycle complete",
            cycle=self._cycle_count,
            instruments=len(instruments),
            candidates=candidates,
            emitted=len(emitted)
        )
        return emitted

    def _plan_emissions(
        self,
        pending: Iterator[Instrument],
        catalog: StrategyCatalog,
        limit: int,
        settings: GeneratorParams,
        now: datetime
    ) -> list[_Emission]:
        """Evaluate instruments from pending until limit candidates are found."""
        emissions: list[_Emission] = []

        for instrument in pending:
            try:
                emission = self._evaluate(instrument, catalog, settings, now)
            except Exception as e:
                self.logger.error(
                    "Error evaluating instrument",
                    symbol=instrument.symbol,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            if emission is not None:
                emissions.append(emission)
                if len(emissions) >= limit:
                    break

        return emissions

    def _evaluate(
        self,
        instrument: Instrument,
        catalog: StrategyCatalog,
        settings: GeneratorParams,
        now: datetime
    ) -> Optional[_Emission]:
        symbol = instrument.symbol
        if not cooldown_elapsed(self.last_signal_time(symbol), now, settings.interval_minutes):
            log_cycle_decision(scheduler_logger, symbol, "skip", "cooldown")
            return None

        record = catalog.best_for(instrument.id)
        if record is None:
            log_cycle_decision(scheduler_logger, symbol, "skip", "no_strategy")
            return None

        try:
            window = self.history.require(symbol, self.history_config.min_digits)
        except InsufficientDataError as e:
            log_cycle_decision(
                scheduler_logger, symbol, "skip", "insufficient_history",
                context={"digits": e.available_count, "required": e.required_count}
            )
            return None

        candidate = self.analyzer(
            window,
            record.strategy_name,
            settings.entry_after_consecutive_count,
            record.win_rate_label,
            analysis_window=self.history_config.analysis_window,
            min_digits=self.history_config.min_digits,
        )
        if candidate is None:
            log_cycle_decision(
                scheduler_logger, symbol, "skip", "no_pattern",
                context={"strategy": record.strategy_name, "digits": len(window)}
            )
            return None

        log_cycle_decision(
            scheduler_logger, symbol, "emit", candidate.predicted_signal.value,
            context={"strategy": record.strategy_name}
        )
        return _Emission(
            instrument=instrument,
            record=record,
            draft=SignalDraft.from_candidate(instrument, record, candidate, now),
        )

    def _execute_emissions(self, emissions: list[_Emission], now: datetime) -> list[GeneratedSignal]:
        if not emissions:
            return []

        emitted: list[GeneratedSignal] = []
        workers = self.max_workers or len(emissions)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="signal-emit") as executor:
            futures = {
                executor.submit(self._emit, emission, now): emission
                for emission in emissions
            }

            for future in as_completed(futures):
                emission = futures[future]
                try:
                    signal = future.result()
                except Exception as e:
                    self.logger.error(
                        "Error generating signal",
                        symbol=emission.instrument.symbol,
                        error=str(e),
                        error_type=type(e).__name__
                    )
                    continue

                if signal is not None:
                    emitted.append(signal)

        return emitted

    def _emit(self, emission: _Emission, now: datetime) -> Optional[GeneratedSignal]:
        """Persist, notify and broadcast one signal."""
        instrument = emission.instrument

        try:
            signal = self.signal_store.create(emission.draft)
        except Exception as e:
            self.logger.error(
                "Failed to persist signal",
                symbol=instrument.symbol,
                strategy=emission.record.strategy_name,
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        if self._notify(signal):
            signal = signal.with_updates(email_sent=True)
            try:
                self.signal_store.update(signal.id, {"email_sent": True})
            except Exception as e:
                self.logger.warning(
                    "Failed to record e-mail status",
                    signal_id=signal.id,
                    error=str(e)
                )

        try:
            self.broadcaster.publish(NEW_SIGNAL_EVENT, signal.to_dict())
        except Exception as e:
            self.logger.warning(
                "Failed to broadcast signal",
                signal_id=signal.id,
                error=str(e),
                error_type=type(e).__name__
            )

        self._mark_emitted(instrument.symbol, now)

        self.logger.info(
            "Generated new signal",
            signal_id=signal.id,
            instrument=instrument.display_name,
            strategy=signal.strategy_name,
            predicted_signal=signal.predicted_signal,
            email_sent=signal.email_sent
        )
        return signal

    def _notify(self, signal: GeneratedSignal) -> bool:
        try:
            sent = bool(self.notifier.notify(signal))
        except Exception as e:
            self.logger.error(
                "Signal notification failed",
                signal_id=signal.id,
                error=str(e),
                error_type=type(e).__name__
            )
            return False

        if not sent:
            self.logger.warning("Signal notification not delivered", signal_id=signal.id)
        return sent

    # -- cooldown -----------------------------------------------------------

    def last_signal_time(self, symbol: str) -> Optional[datetime]:
        with self._last_signal_lock:
            return self._last_signal_time.get(symbol)

    def last_signal_times(self) -> dict[str, datetime]:
        with self._last_signal_lock:
            return dict(self._last_signal_time)

    def _mark_emitted(self, symbol: str, now: datetime) -> None:
        with self._last_signal_lock:
            previous = self._last_signal_time.get(symbol)
            if previous is None or now > previous:
                self._last_signal_time[symbol] = now

    def get_stats(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "cycles": self._cycle_count,
            "instruments_signalled": len(self.last_signal_times()),
            "settings": asdict(self.get_options()),
        }
