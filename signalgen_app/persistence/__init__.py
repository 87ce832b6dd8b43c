"""Store interfaces and their SQLite / in-memory implementations."""

from .base import InstrumentStore, PerformanceStore, SignalStore
from .memory import InMemoryMarketCatalog, InMemorySignalStore
from .signal_store import SqliteSignalStore

__all__ = [
    "InstrumentStore",
    "PerformanceStore",
    "SignalStore",
    "InMemoryMarketCatalog",
    "InMemorySignalStore",
    "SqliteSignalStore",
]
