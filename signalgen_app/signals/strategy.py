"""Read-only snapshot of strategy performance grouped by instrument."""

from typing import Iterable, Optional

from ..data.models import StrategyPerformanceRecord


def select_best_strategy(
    records: Iterable[StrategyPerformanceRecord]
) -> Optional[StrategyPerformanceRecord]:
    """
    Record with the highest parsed win rate.

    Ties go to the first record encountered. Records whose win rate cannot
    be parsed rank below every parseable record; if none parse, the first
    record is returned.
    """
    best: Optional[StrategyPerformanceRecord] = None
    best_rate: Optional[float] = None

    for record in records:
        rate = record.win_rate_pct
        if best is None:
            best, best_rate = record, rate
        elif rate is not None and (best_rate is None or rate > best_rate):
            best, best_rate = record, rate

    return best


class StrategyCatalog:
    """Performance records for one generation cycle, grouped by instrument id."""

    def __init__(self, records: Iterable[StrategyPerformanceRecord]):
        self._by_instrument: dict[int, list[StrategyPerformanceRecord]] = {}
        for record in records:
            self._by_instrument.setdefault(record.instrument_id, []).append(record)

    def records_for(self, instrument_id: int) -> list[StrategyPerformanceRecord]:
        return list(self._by_instrument.get(instrument_id, []))

    def best_for(self, instrument_id: int) -> Optional[StrategyPerformanceRecord]:
        return select_best_strategy(self._by_instrument.get(instrument_id, []))

    def instrument_ids(self) -> list[int]:
        return list(self._by_instrument)

    def __len__(self) -> int:
        return sum(len(records) for records in self._by_instrument.values())
