"""Default configuration parameters for the signal generation engine."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GeneratorParams:
    """Signal generation cycle parameters."""
    max_signals: int = 5                          # Max signals emitted per cycle
    interval_minutes: int = 5                     # Cycle cadence and per-instrument cooldown
    entry_after_consecutive_count: int = 3        # Run length / frequency threshold


@dataclass(frozen=True)
class HistoryParams:
    """Rolling digit history parameters."""
    window_size: int = 20              # Digits kept per symbol
    analysis_window: int = 10          # Most recent digits considered by the analyzer
    min_digits: int = 5                # Digits required before analysis


@dataclass(frozen=True)
class StorageParams:
    """Signal persistence parameters."""
    db_path: str = "signals.db"
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class EmailParams:
    """E-mail notification parameters."""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    sender_name: str = "Deriv Trading Bot"
    recipients: tuple[str, ...] = field(default_factory=tuple)
    archive_dir: str = "local_emails"
    display_timezone: str = "Africa/Nairobi"
    timeout_seconds: int = 30


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    generator: GeneratorParams
    history: HistoryParams
    storage: StorageParams
    email: EmailParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        generator=GeneratorParams(),
        history=HistoryParams(),
        storage=StorageParams(),
        email=EmailParams(),
    )
