"""Tests for audit logging of checkpoint decisions and flag transitions."""

import logging
from unittest.mock import patch

import pytest
import structlog
from structlog.testing import capture_logs

from propguard.alerts import BreachAlertLadder, MetricType
from propguard.logging import account_context, configure_logging, get_logger
from propguard.logging.config import get_alert_logger, get_checkpoint_logger, log_check_decision
from propguard.persistence import InMemoryFlagStore
from propguard.risk.checkpoint import PreTradeCheckpoint


class TestCheckDecisionLogging:
    """Test log_check_decision levels and fields."""

    def test_passed_check_is_debug(self):
        with capture_logs() as logs:
            log_check_decision(get_checkpoint_logger("test"), "daily", True, True, "ok")

        assert logs[0]["log_level"] == "debug"
        assert logs[0]["check_result"] == "PASS"
        assert logs[0]["subsystem"] == "checkpoint"
        assert logs[0]["audit_trail"] is True

    def test_failed_critical_check_is_warning(self):
        with capture_logs() as logs:
            log_check_decision(get_logger("test"), "daily", False, True, "breach", context={"pair": "EURUSD"})

        assert logs[0]["log_level"] == "warning"
        assert logs[0]["event"] == "Critical check failed"
        assert logs[0]["context"] == {"pair": "EURUSD"}

    def test_failed_advisory_check_is_info(self):
        with capture_logs() as logs:
            log_check_decision(get_logger("test"), "room", False, False, "thin buffer")

        assert logs[0]["log_level"] == "info"
        assert logs[0]["check_result"] == "FAIL"

    def test_checkpoint_logs_every_check(self, small_account, sample_trade):
        with capture_logs() as logs:
            PreTradeCheckpoint().assess(sample_trade, small_account)

        checks = [entry for entry in logs if "check_name" in entry]
        assert len(checks) == 5
        assert logs[-1]["event"] == "Trade assessed"
        assert logs[-1]["risk_level"] == "low"


class TestFlagTransitionLogging:

    def test_fire_and_rearm_logged(self):
        ladder = BreachAlertLadder(InMemoryFlagStore())

        with capture_logs() as logs:
            ladder.evaluate_metric("acct-1", MetricType.DAILY, 60.0, 200.0)
            ladder.evaluate_metric("acct-1", MetricType.DAILY, 10.0, 450.0)

        transitions = [entry for entry in logs if entry["event"] == "Notification flag transition"]
        assert [(t["from_state"], t["to_state"]) for t in transitions] == [("armed", "fired"), ("fired", "armed")]
        assert transitions[0]["threshold"] == 50.0
        assert transitions[0]["subsystem"] == "breach_alerts"

    def test_alert_logger_binding(self):
        with capture_logs() as logs:
            get_alert_logger("test").info("hello")
        assert logs[0]["audit_trail"] is True


class TestConfigureLogging:
    """Test structlog configuration."""

    def test_json_renderer_last(self):
        with patch("propguard.logging.config.structlog.configure") as mock_configure, \
                patch("propguard.logging.config.logging.basicConfig"):
            configure_logging(level="DEBUG", format_json=True)

        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_and_caller(self):
        with patch("propguard.logging.config.structlog.configure") as mock_configure, \
                patch("propguard.logging.config.logging.basicConfig"):
            configure_logging(include_caller=True, include_timestamp=False)

        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert any(isinstance(p, structlog.processors.CallsiteParameterAdder) for p in processors)
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_level_and_format_from_environment(self, monkeypatch):
        monkeypatch.setenv("PROPGUARD_LOG_LEVEL", "warning")
        monkeypatch.setenv("PROPGUARD_LOG_FORMAT", "json")

        with patch("propguard.logging.config.structlog.configure") as mock_configure, \
                patch("propguard.logging.config.logging.basicConfig") as mock_basic:
            configure_logging()

        assert mock_basic.call_args.kwargs["level"] == logging.WARNING
        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert processors[0] is structlog.contextvars.merge_contextvars

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(level="CHATTY")


class TestAccountContext:

    def test_context_bound_inside_block(self):
        with account_context("acct-9", operation="refresh"):
            assert structlog.contextvars.get_contextvars() == {"account_id": "acct-9", "operation": "refresh"}

        assert "account_id" not in structlog.contextvars.get_contextvars()
