"""Tests for logging configuration and cycle decision logging."""

from unittest.mock import Mock

import structlog
from structlog.testing import capture_logs

from signalgen_app.logging.config import (
    build_processors,
    configure_logging,
    get_logger,
    get_scheduler_logger,
    log_cycle_decision,
)


class TestLoggingConfig:
    """Test logging setup helpers."""

    def setup_method(self):
        configure_logging(level="DEBUG", format_json=True)

    def teardown_method(self):
        structlog.reset_defaults()

    def test_get_logger(self):
        logger = get_logger("signalgen_app.test")
        assert logger is not None

    def test_scheduler_logger_binds_subsystem(self):
        with capture_logs() as captured:
            logger = get_scheduler_logger("signalgen_app.test")
            logger.info("Scheduler event")

        assert captured[0]["subsystem"] == "scheduler"
        assert captured[0]["audit_trail"] is True


class TestLogCycleDecision:
    """Test log_cycle_decision formatting."""

    def setup_method(self):
        self.logger = Mock()
        self.bound = Mock()
        self.logger.bind.return_value = self.bound
        self.bound.bind.return_value = self.bound

    def test_emit_logged_at_info(self):
        log_cycle_decision(self.logger, "R_10", "emit", "ODD", context={"strategy": "Even/Odd"})

        self.logger.bind.assert_called_once_with(symbol="R_10", decision="emit", reason="ODD")
        self.bound.bind.assert_called_once_with(context={"strategy": "Even/Odd"})
        self.bound.info.assert_called_once_with("Cycle decision")
        self.bound.debug.assert_not_called()

    def test_skip_logged_at_debug(self):
        log_cycle_decision(self.logger, "R_10", "skip", "cooldown")

        self.bound.bind.assert_not_called()
        self.bound.debug.assert_called_once_with("Cycle decision")
        self.bound.info.assert_not_called()


class TestBuildProcessors:
    """Test the shared processor chain."""

    def test_optional_processors(self):
        base = build_processors(include_timestamp=False)
        full = build_processors(include_timestamp=True, include_caller=True)

        assert len(full) == len(base) + 2
        assert any(isinstance(p, structlog.processors.TimeStamper) for p in full)
