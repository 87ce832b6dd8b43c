"""
Structured logging for the signal generation engine.
"""
from .config import (
    configure_logging,
    get_logger,
    get_scheduler_logger,
    log_cycle_decision,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_scheduler_logger",
    "log_cycle_decision",
]
