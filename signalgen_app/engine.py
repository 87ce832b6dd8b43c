"""
Main signal engine coordinator.

Wires the tick feed into the rolling digit history and owns the periodic
signal scheduler:
Ticks → Digit History → (timer) Strategy Selection → Pattern Analysis → Signals
"""

from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog

from .config.defaults import DefaultConfig, GeneratorParams
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.feed import TickSource
from .data.history import RollingDigitHistory
from .data.models import GeneratedSignal
from .data.parsers import parse_tick_payload
from .delivery.base import NotifySink
from .delivery.broadcast import BroadcastHub
from .delivery.email_delivery import EmailSignalNotifier
from .errors import DataQualityError, SettingsValidationError
from .persistence.base import InstrumentStore, PerformanceStore, SignalStore
from .persistence.memory import InMemoryMarketCatalog
from .persistence.signal_store import SqliteSignalStore
from .signals.scheduler import SignalScheduler
from .utils.time import utc_now

logger = structlog.get_logger(__name__)


class SignalEngine:
    """
    Composition root for the digit signal generation system.

    Collaborators not passed in are built from configuration: the default
    instrument catalogue in memory, a SQLite signal store and the e-mail
    notifier with its local archive.
    """

    def __init__(
        self,
        config: Optional[DefaultConfig] = None,
        config_dir: Optional[Union[str, Path]] = None,
        tick_source: Optional[TickSource] = None,
        instrument_store: Optional[InstrumentStore] = None,
        performance_store: Optional[PerformanceStore] = None,
        signal_store: Optional[SignalStore] = None,
        notifier: Optional[NotifySink] = None,
        broadcaster: Optional[BroadcastHub] = None,
        clock: Callable = utc_now
    ) -> None:
        """Initialize the signal engine."""
        self.logger = logger

        if config is None:
            config = ConfigLoader.create(config_dir).load()
        self.config = config

        catalog = None
        if instrument_store is None or performance_store is None:
            catalog = InMemoryMarketCatalog()

        self.instrument_store = instrument_store if instrument_store is not None else catalog
        self.performance_store = performance_store if performance_store is not None else catalog
        if signal_store is None:
            signal_store = SqliteSignalStore(
                config.storage.db_path,
                timeout=config.storage.timeout_seconds
            )
        self.signal_store = signal_store
        self.notifier = notifier if notifier is not None else EmailSignalNotifier(config.email)
        self.broadcaster = broadcaster if broadcaster is not None else BroadcastHub()

        self.history = RollingDigitHistory(config.history)
        self.scheduler = SignalScheduler(
            instrument_store=self.instrument_store,
            performance_store=self.performance_store,
            signal_store=self.signal_store,
            notifier=self.notifier,
            broadcaster=self.broadcaster,
            history=self.history,
            settings=config.generator,
            history_config=config.history,
            clock=clock
        )

        self.tick_source = tick_source or TickSource()
        self.tick_source.subscribe(self.handle_tick)

        self._ticks_received = 0
        self._ticks_dropped = 0

        self.logger.info(
            "Signal engine initialized",
            **asdict(config.generator)
        )

    # -- tick ingestion -----------------------------------------------------

    def handle_tick(self, payload: Any) -> Optional[int]:
        """
        Record one tick in the digit history.

        Returns:
            The extracted digit, or None when the tick was dropped
        """
        self._ticks_received += 1

        try:
            tick = parse_tick_payload(payload)
            return self.history.observe(tick.symbol, tick.price)

        except DataQualityError as e:
            self._ticks_dropped += 1
            self.logger.warning(
                "Dropping malformed tick",
                error=str(e),
                error_type=type(e).__name__,
                context=getattr(e, 'context', {})
            )
            return None

    # -- lifecycle and settings ---------------------------------------------

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_running

    def get_options(self) -> GeneratorParams:
        return self.scheduler.get_options()

    def set_options(self, **changes: Any) -> GeneratorParams:
        """Merge settings without validation; effective on next start()."""
        return self.scheduler.set_options(**changes)

    def update_settings(self, changes: dict[str, Any]) -> GeneratorParams:
        """
        Validate and apply generator settings, restarting a running scheduler.

        Raises:
            SettingsValidationError: a value is out of range or unknown;
                scheduler state is left untouched
        """
        validation_errors = ConfigValidator.validate_generator_settings(changes)
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            self.logger.error("Generator settings validation failed", errors=error_msgs)
            raise SettingsValidationError(
                "Invalid generator settings: " + "; ".join(error_msgs),
                errors=validation_errors
            )

        settings = self.scheduler.set_options(**changes)
        if self.scheduler.is_running:
            self.scheduler.start()

        return settings

    # -- subscribers --------------------------------------------------------

    def subscribe(self, callback: Callable[[str, dict[str, Any]], None]) -> None:
        """Receive ("new_signal", payload) for every emitted signal."""
        self.broadcaster.subscribe(callback)

    def unsubscribe(self, callback: Callable[[str, dict[str, Any]], None]) -> None:
        self.broadcaster.unsubscribe(callback)

    def run_cycle(self) -> list[GeneratedSignal]:
        """Run one generation cycle now, outside the timer."""
        return self.scheduler.run_cycle()

    def get_runtime_stats(self) -> dict[str, Any]:
        """Get runtime statistics."""
        return {
            'running': self.scheduler.is_running,
            'tracked_symbols': len(self.history),
            'ticks_received': self._ticks_received,
            'ticks_dropped': self._ticks_dropped,
            'scheduler': self.scheduler.get_stats(),
            'notifier': self.notifier.get_stats(),
            'broadcast': self.broadcaster.get_stats(),
        }
