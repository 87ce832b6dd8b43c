"""Abstract store interfaces consumed by the signal scheduler."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..data.models import (
    GeneratedSignal,
    Instrument,
    SignalDraft,
    StrategyPerformanceRecord,
)

# Fields of a persisted signal that may change after creation
UPDATABLE_FIELDS = frozenset({"email_sent", "outcome", "metadata"})


class InstrumentStore(ABC):
    """Source of tracked instruments."""

    @abstractmethod
    def list_instruments(self) -> list[Instrument]:
        """Instruments in scan order."""
        pass


class PerformanceStore(ABC):
    """Source of strategy performance records."""

    @abstractmethod
    def list_performance(self) -> list[StrategyPerformanceRecord]:
        """All (instrument, strategy) performance records."""
        pass


class SignalStore(ABC):
    """Persistence for generated signals."""

    @abstractmethod
    def create(self, draft: SignalDraft) -> GeneratedSignal:
        """
        Persist a new signal.

        Raises:
            PersistenceError: the signal could not be stored
        """
        pass

    @abstractmethod
    def update(self, signal_id: int, fields: dict[str, Any]) -> Optional[GeneratedSignal]:
        """
        Apply a partial update; None when the signal does not exist.

        Raises:
            ValueError: fields contains a non-updatable field
            PersistenceError: the update could not be stored
        """
        pass

    @abstractmethod
    def get(self, signal_id: int) -> Optional[GeneratedSignal]:
        pass

    @abstractmethod
    def list_recent(self, limit: int = 100) -> list[GeneratedSignal]:
        """Most recent signals first."""
        pass


def check_update_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
