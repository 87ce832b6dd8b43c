"""
Centralized logging configuration for the signal generation engine.

All components log through structlog with key-value events. Call
configure_logging() once at process start; module loggers are obtained
with get_logger(__name__).
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor


def build_processors(
    include_timestamp: bool = True,
    include_caller: bool = False
) -> list[Processor]:
    """Processor chain shared by console and JSON output, renderer excluded."""
    chain: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        chain.append(structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.THREAD_NAME,
            ]
        ))

    return chain


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Configure structlog for the whole engine.

    Args:
        level: Minimum level name (DEBUG shows per-instrument skip decisions)
        format_json: Emit one JSON object per line instead of console output
        include_timestamp: Add an ISO8601 UTC timestamp
        include_caller: Add file, line and thread name; useful when tracing
            the timer thread and emission workers
        extra_processors: Processors inserted before the renderer
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = build_processors(include_timestamp, include_caller)
    processors.extend(extra_processors or [])
    processors.append(
        structlog.processors.JSONRenderer() if format_json
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a configured structlog logger instance."""
    return structlog.get_logger(name)


def get_scheduler_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for generation-cycle decisions.

    Binds the scheduler subsystem so per-instrument skip/emit decisions
    can be filtered out of the general log stream.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for cycle decisions
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="scheduler",
        audit_trail=True
    )


def log_cycle_decision(
    logger: FilteringBoundLogger,
    symbol: str,
    decision: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a per-instrument cycle decision with standardized format.

    Args:
        logger: Structlog logger instance
        symbol: Instrument symbol being evaluated
        decision: "emit" or "skip"
        reason: Detailed reason for the decision
        context: Additional context data
    """
    bound_logger = logger.bind(
        symbol=symbol,
        decision=decision,
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if decision == "emit":
        bound_logger.info("Cycle decision")
    else:
        bound_logger.debug("Cycle decision")
