"""Unit tests for the risk compliance engine."""

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from propguard.alerts import AlertSession
from propguard.engine import RiskComplianceEngine
from propguard.errors import InvalidInputError, NotificationStoreUnavailableError, TradeBlockedError
from propguard.models import Direction, ProposedTrade
from propguard.persistence import InMemoryFlagStore
from propguard.risk import InsufficientEmotionalData, RiskLevel

NOW = datetime(2024, 3, 15, 15, 0, 0, tzinfo=timezone.utc)


class TestRiskComplianceEngine:
    """Test suite for the RiskComplianceEngine class."""

    def setup_method(self):
        self.dispatcher = MagicMock()
        self.store = InMemoryFlagStore()
        self.engine = RiskComplianceEngine(flag_store=self.store, dispatcher=self.dispatcher)

    def test_engine_initialization(self) -> None:
        engine = RiskComplianceEngine(dispatcher=MagicMock())

        assert isinstance(engine.flag_store, InMemoryFlagStore)
        assert engine.get_runtime_stats()["refreshes"] == 0

    def test_engine_initialization_with_config_dir(self) -> None:
        with patch("propguard.engine.ConfigLoader") as mock_config_loader:
            mock_config_loader.create.return_value = MagicMock()
            RiskComplianceEngine(config_dir="/custom/path", dispatcher=MagicMock())
            mock_config_loader.create.assert_called_once_with("/custom/path")

    def test_refresh_fires_notifications_through_dispatcher(self, sample_account) -> None:
        """Losing 60% of the 5000 daily limit fires the 50% rung."""
        account = sample_account.with_balance(97000.0)
        refresh = self.engine.refresh_account(account)

        assert refresh.metrics.daily_used_percent == pytest.approx(60.0)
        assert [n.tag for n in refresh.alerts.notifications] == ["Daily_50"]
        self.dispatcher.notify.assert_called_once()
        assert self.dispatcher.notify.call_args.args[0] == "FTMO 100k - WARNING"
        assert self.dispatcher.notify.call_args.kwargs["account_id"] == "acct-001"

    def test_refresh_is_idempotent(self, sample_account) -> None:
        account = sample_account.with_balance(97000.0)

        self.engine.refresh_account(account)
        second = self.engine.refresh_account(account)

        assert second.alerts.notifications == ()
        assert self.dispatcher.notify.call_count == 1

    def test_refresh_requires_account_id(self, sample_account) -> None:
        """Flags are keyed by account id, never by display name."""
        with pytest.raises(InvalidInputError) as exc_info:
            self.engine.refresh_account(replace(sample_account, account_id=None))

        assert exc_info.value.field == "account_id"
        assert self.engine.get_runtime_stats()["refreshes"] == 0

    def test_concurrent_refreshes_counted_exactly(self, sample_account) -> None:
        thread_count = 16
        barrier = threading.Barrier(thread_count)
        account = sample_account.with_balance(97000.0)

        def refresh():
            barrier.wait()
            self.engine.refresh_account(account)

        threads = [threading.Thread(target=refresh) for _ in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = self.engine.get_runtime_stats()
        assert stats["refreshes"] == thread_count
        assert stats["notifications"] == 1
        assert self.engine.get_runtime_stats()["refreshes"] == 2
        assert self.engine.get_runtime_stats()["notifications"] == 1

    def test_refresh_with_custom_ladder(self, sample_account) -> None:
        overrides = {"alerts": {"levels": [
            {"threshold": 15.0, "severity": "critical", "message": "Stop"},
        ]}}
        refresh = self.engine.refresh_account(sample_account, overrides=overrides)

        assert [n.tag for n in refresh.alerts.notifications] == ["Daily_15"]
        assert refresh.alerts.notifications[0].require_interaction is True

    def test_refresh_degrades_when_store_down(self, sample_account) -> None:
        store = MagicMock()
        store.name = "broken"
        store.compare_and_set.side_effect = NotificationStoreUnavailableError("down", store="broken")
        engine = RiskComplianceEngine(flag_store=store, dispatcher=self.dispatcher)

        refresh = engine.refresh_account(sample_account.with_balance(97000.0), session=AlertSession())

        assert refresh.alerts.degraded is True
        assert refresh.metrics.daily_used_percent == pytest.approx(60.0)
        assert engine.get_runtime_stats()["degraded_refreshes"] == 1

    def test_invalid_overrides_rejected(self, sample_account) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            self.engine.refresh_account(sample_account, overrides={"cascade": {"steps": 0}})

        assert exc_info.value.field == "cascade.steps"
        assert exc_info.value.context["errors"]

    def test_check_trade_and_clear(self, sample_account) -> None:
        trade = ProposedTrade(pair="GBPUSD", direction=Direction.BUY, lot_size=10.0,
                              stop_loss_pips=40.0, pip_value=10.0)
        assessment = self.engine.check_trade(trade, sample_account)

        assert assessment.potential_loss == pytest.approx(4000.0)
        assert assessment.risk_level == RiskLevel.CRITICAL
        with pytest.raises(TradeBlockedError):
            self.engine.clear_for_submission(assessment, acknowledged=True)

    def test_check_trade_uses_account_overrides(self, sample_account, sample_trade) -> None:
        overrides = {"checkpoint": {"max_risk_per_trade_pct": 0.05, "daily_budget_high_pct": 50.0,
                                    "daily_budget_medium_pct": 25.0}}
        assessment = self.engine.check_trade(sample_trade, sample_account, overrides=overrides)

        assert assessment.risk_level == RiskLevel.HIGH

    def test_simulate_cascade(self, sample_account) -> None:
        projection = self.engine.simulate_cascade(sample_account, 1.0, steps=6)

        assert projection.starting_balance == 99000.0
        assert len(projection.steps) == 6
        assert projection.risk_amount == pytest.approx(990.0)

    def test_plan_recovery(self, sample_account) -> None:
        plan = self.engine.plan_recovery(sample_account, current_risk_pct=1.0)

        assert plan.in_drawdown is True
        assert plan.drawdown_amount == pytest.approx(1000.0)
        assert plan.safe_risk_pct == 0.5

    def test_emotional_risk(self, positive_check_in, winning_trades, sample_account) -> None:
        score = self.engine.emotional_risk(positive_check_in, winning_trades, 1.0, account=sample_account)
        assert score.suggested_risk_multiplier == 1.0

        assert isinstance(self.engine.emotional_risk(None, [], 1.0), InsufficientEmotionalData)

    def test_phase_progress(self, sample_account) -> None:
        progress = self.engine.phase_progress(sample_account, NOW - timedelta(days=5), now=NOW)

        assert progress.total_days == 30
        assert progress.days_remaining == 25

    def test_payout_projection_uses_firm(self, sample_account) -> None:
        projection = self.engine.payout_projection(sample_account)

        assert projection.funded_phase.name == "Funded"
        assert projection.payout_split_pct == pytest.approx(80.0)

    def test_payout_override_beats_firm(self, sample_account) -> None:
        projection = self.engine.payout_projection(
            sample_account, overrides={"payout": {"payout_split_pct": 90.0}}
        )
        assert projection.payout_split_pct == pytest.approx(90.0)

    def test_journal_stats(self, sample_account, winning_trades) -> None:
        stats = self.engine.journal_stats(sample_account, winning_trades, now=winning_trades[0].created_at)

        assert stats.week_trades == 3
        assert stats.week_pnl == pytest.approx(360.0)

    def test_health_check(self) -> None:
        self.dispatcher.health_check.return_value = {"stdout": True}

        assert self.engine.health_check() == {"flag_store": True, "delivery": {"stdout": True}}

    def test_shutdown_drains_dispatcher(self) -> None:
        self.engine.shutdown()
        self.dispatcher.shutdown.assert_called_once_with(wait=True)
