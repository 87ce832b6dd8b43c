"""
Canonical data models for instruments, strategy records and signals.

Records are immutable; changes to a persisted signal (email_sent, outcome)
produce a new GeneratedSignal via with_updates().
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from ..utils.time import format_timestamp


class StrategyName(str, Enum):
    """Digit strategies the pattern analyzer understands."""
    EVEN_ODD = "Even/Odd"
    OVER_UNDER = "Over/Under"
    MATCHES_DIFFERS = "Matches/Differs"


class PredictedSignal(str, Enum):
    """Predicted contract direction."""
    EVEN = "EVEN"
    ODD = "ODD"
    OVER = "OVER"
    UNDER = "UNDER"
    MATCHES = "MATCHES"
    DIFFERS = "DIFFERS"


class SignalOutcome(str, Enum):
    """Settlement outcome, set by an external process."""
    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"


@dataclass(frozen=True)
class Instrument:
    """Tradable volatility index."""
    id: int
    symbol: str            # Feed symbol, e.g. R_75
    display_name: str      # e.g. Volatility 75


@dataclass(frozen=True)
class StrategyPerformanceRecord:
    """Historical performance of one strategy on one instrument."""
    instrument_id: int
    strategy_type: str
    strategy_name: str
    win_rate: Union[str, float]    # "68%" or 68.0
    sample_size: int = 0

    @property
    def win_rate_pct(self) -> Optional[float]:
        """Win rate as a float percentage, None when unparseable."""
        if isinstance(self.win_rate, bool):
            return None
        if isinstance(self.win_rate, (int, float)):
            return float(self.win_rate)
        try:
            return float(str(self.win_rate).strip().rstrip('%').strip())
        except ValueError:
            return None

    @property
    def win_rate_label(self) -> str:
        """Win rate as displayed and copied onto signals."""
        if isinstance(self.win_rate, str):
            return self.win_rate
        return f"{self.win_rate:g}%"


@dataclass(frozen=True)
class Tick:
    """Single price observation from the feed."""
    symbol: str
    price: str             # Decimal string as quoted by the feed


@dataclass(frozen=True)
class SignalCandidate:
    """Pattern analyzer output before it is attached to an instrument."""
    strategy_name: str
    predicted_signal: PredictedSignal
    reason: str
    entry_point: str
    win_probability: str
    run_length: Optional[int] = None
    target_digit: Optional[int] = None


@dataclass(frozen=True)
class SignalDraft:
    """Signal ready to be persisted."""
    instrument_id: int
    instrument_name: str
    strategy_type: str
    strategy_name: str
    entry_point: str
    predicted_signal: str
    reason: str
    win_probability: str
    created_at: datetime
    email_sent: bool = False
    outcome: SignalOutcome = SignalOutcome.PENDING
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_candidate(
        cls,
        instrument: Instrument,
        record: StrategyPerformanceRecord,
        candidate: SignalCandidate,
        created_at: datetime
    ) -> "SignalDraft":
        """Attach instrument and strategy identity to an analyzer candidate."""
        metadata: dict[str, Any] = {"symbol": instrument.symbol}
        if candidate.run_length is not None:
            metadata["run_length"] = candidate.run_length
        if candidate.target_digit is not None:
            metadata["target_digit"] = candidate.target_digit

        return cls(
            instrument_id=instrument.id,
            instrument_name=instrument.display_name,
            strategy_type=record.strategy_type,
            strategy_name=record.strategy_name,
            entry_point=candidate.entry_point,
            predicted_signal=candidate.predicted_signal.value,
            reason=candidate.reason,
            win_probability=candidate.win_probability,
            created_at=created_at,
            metadata=metadata,
        )


@dataclass(frozen=True)
class GeneratedSignal(SignalDraft):
    """Persisted signal with store-assigned id."""
    id: int = 0

    @classmethod
    def from_draft(cls, signal_id: int, draft: SignalDraft) -> "GeneratedSignal":
        values = {name: getattr(draft, name) for name in draft.__dataclass_fields__}
        return cls(id=signal_id, **values)

    def with_updates(self, **fields: Any) -> "GeneratedSignal":
        return replace(self, **fields)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation for broadcast and archiving."""
        data = asdict(self)
        data["created_at"] = format_timestamp(self.created_at)
        data["outcome"] = SignalOutcome(self.outcome).value
        return data
