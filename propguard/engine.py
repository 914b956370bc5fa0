"""
Risk and compliance engine coordinator.

Wires configuration, the notification flag store and delivery around the
pure calculations. Components never call each other; the engine composes
them per request, resolving configuration per account with firm presets and
account overrides.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence, Union

import structlog

from .alerts import AlertSession, BreachAlertLadder, LadderEvaluation
from .config.defaults import RiskConfig
from .config.loader import ConfigLoader
from .config.notification_delivery import NotificationDeliveryConfig
from .config.validation import ConfigValidator
from .delivery import NotificationDispatcher
from .errors import InvalidInputError
from .logging import account_context
from .metrics import AccountMetrics, JournalStats, calculate_account_metrics, calculate_journal_stats
from .models import CheckIn, ProposedTrade, TradeRecord, TradingAccount
from .persistence import InMemoryFlagStore, NotificationFlagStore
from .risk import (
    CascadeProjection,
    EmotionalRiskScore,
    InsufficientEmotionalData,
    PayoutProjection,
    PhaseProgress,
    PreTradeCheckpoint,
    RecoveryPlan,
    RiskAssessment,
    plan_recovery,
    project_payouts,
    project_phase_progress,
    score_emotional_risk,
    simulate_loss_cascade,
)
from .utils.time import DateLike

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AccountRefresh:
    """Metrics and ladder outcome for one account refresh."""
    metrics: AccountMetrics
    alerts: LadderEvaluation

    def to_dict(self) -> dict[str, Any]:
        return {"metrics": self.metrics.to_dict(), "alerts": self.alerts.to_dict()}


class RiskComplianceEngine:
    """
    Main coordinator for the prop-firm risk and compliance system.

    Account snapshot -> Metrics -> Alert ladder -> Notifications, plus the
    on-demand projections (checkpoint, cascade, recovery, emotional, phase,
    payout, journal).
    """

    def __init__(
        self,
        config_dir: Optional[str] = None,
        flag_store: Optional[NotificationFlagStore] = None,
        delivery_config: Optional[NotificationDeliveryConfig] = None,
        dispatcher: Optional[NotificationDispatcher] = None
    ) -> None:
        self.logger = logger

        self.config_loader = ConfigLoader.create(config_dir)
        self.flag_store = flag_store or InMemoryFlagStore()
        self.dispatcher = dispatcher or NotificationDispatcher(delivery_config)

        self._stats_lock = threading.Lock()
        self._refresh_count = 0
        self._notification_count = 0
        self._degraded_count = 0

        self.logger.info(
            "Risk compliance engine initialized",
            flag_store=self.flag_store.name,
            delivery_destinations=list(self.dispatcher.delivery_handlers)
        )

    def config_for(
        self,
        account: TradingAccount,
        overrides: Optional[dict[str, Any]] = None
    ) -> RiskConfig:
        """
        Resolve configuration for an account.

        Raises:
            InvalidInputError: If the account overrides fail validation
        """
        if overrides:
            validation_errors = ConfigValidator.validate_config(overrides)
            if validation_errors:
                error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
                self.logger.error(
                    "Account configuration validation failed",
                    account_id=account.account_id,
                    errors=error_msgs
                )
                raise InvalidInputError(
                    "Invalid account configuration overrides",
                    field=validation_errors[0].field,
                    value=validation_errors[0].value,
                    context={"errors": error_msgs}
                )

        return self.config_loader.load(account.firm, overrides)

    def account_metrics(
        self,
        account: TradingAccount,
        overrides: Optional[dict[str, Any]] = None
    ) -> AccountMetrics:
        config = self.config_for(account, overrides)
        return calculate_account_metrics(account, config.zones, config.recovery_risk)

    def refresh_account(
        self,
        account: TradingAccount,
        session: Optional[AlertSession] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> AccountRefresh:
        """
        Recompute metrics and run the breach alert ladder.

        Notifications are handed to the dispatcher; with async dispatch this
        returns without waiting for delivery.

        Raises:
            InvalidInputError: If the account has no ``account_id`` to key
                its notification flags on
        """
        if not account.account_id:
            raise InvalidInputError(
                "account_id is required to track breach notifications",
                field="account_id",
                value=account.account_id
            )

        config = self.config_for(account, overrides)
        metrics = calculate_account_metrics(account, config.zones, config.recovery_risk)

        ladder = BreachAlertLadder(self.flag_store, self.dispatcher, config.alerts)
        with account_context(account.account_id, operation="refresh"):
            evaluation = ladder.evaluate(
                account.account_id,
                metrics,
                account_name=account.display_name,
                session=session,
            )

        with self._stats_lock:
            self._refresh_count += 1
            self._notification_count += len(evaluation.notifications)
            if evaluation.degraded:
                self._degraded_count += 1

        self.logger.debug(
            "Account refreshed",
            account_id=account.account_id,
            daily_used_percent=round(metrics.daily_used_percent, 2),
            total_used_percent=round(metrics.total_used_percent, 2),
            notifications=len(evaluation.notifications),
            degraded=evaluation.degraded
        )

        return AccountRefresh(metrics=metrics, alerts=evaluation)

    def check_trade(
        self,
        trade: ProposedTrade,
        account: TradingAccount,
        overrides: Optional[dict[str, Any]] = None
    ) -> RiskAssessment:
        """Run the pre-trade checklist against the account's remaining budgets."""
        config = self.config_for(account, overrides)
        metrics = calculate_account_metrics(account, config.zones, config.recovery_risk)
        checkpoint = PreTradeCheckpoint(config.checkpoint)
        with account_context(account.account_id, operation="check_trade"):
            return checkpoint.assess(trade, account, metrics.daily_remaining, metrics.total_remaining)

    def clear_for_submission(self, assessment: RiskAssessment, acknowledged: bool = False) -> None:
        """
        Raises:
            TradeBlockedError: If the gate is closed
        """
        PreTradeCheckpoint().clear_for_submission(assessment, acknowledged)

    def simulate_cascade(
        self,
        account: TradingAccount,
        risk_per_trade_pct: float,
        lot_size_multiplier: float = 1.0,
        steps: Optional[int] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> CascadeProjection:
        config = self.config_for(account, overrides)
        return simulate_loss_cascade(
            current_balance=account.current_balance,
            account_size=account.account_size,
            max_daily_drawdown_pct=account.max_daily_drawdown_pct,
            max_total_drawdown_pct=account.max_total_drawdown_pct,
            risk_per_trade_pct=risk_per_trade_pct,
            lot_size_multiplier=lot_size_multiplier,
            steps=steps,
            params=config.cascade,
        )

    def plan_recovery(
        self,
        account: TradingAccount,
        current_risk_pct: Optional[float] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> RecoveryPlan:
        config = self.config_for(account, overrides)
        return plan_recovery(account, current_risk_pct, config.recovery)

    def emotional_risk(
        self,
        check_in: Optional[CheckIn],
        trades: Sequence[TradeRecord],
        current_risk_pct: float,
        account: Optional[TradingAccount] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> Union[EmotionalRiskScore, InsufficientEmotionalData]:
        params = self.config_for(account, overrides).emotional if account else None
        return score_emotional_risk(check_in, trades, current_risk_pct, params)

    def phase_progress(
        self,
        account: TradingAccount,
        start_date: DateLike,
        total_days: Optional[int] = None,
        now: Optional[datetime] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> PhaseProgress:
        config = self.config_for(account, overrides)
        return project_phase_progress(account, start_date, total_days, now, config.phase)

    def payout_projection(
        self,
        account: TradingAccount,
        payout_split_pct: Optional[float] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> PayoutProjection:
        """
        Project payouts using the account firm's phase preset.

        An account override of the payout split takes precedence over the
        firm's funded phase.
        """
        config = self.config_for(account, overrides)
        firm_profile = self.config_loader.load_firm_profile(account.firm)
        if payout_split_pct is None and "payout_split_pct" in (overrides or {}).get("payout", {}):
            payout_split_pct = config.payout.payout_split_pct
        return project_payouts(account, payout_split_pct, firm_profile, config.payout)

    def journal_stats(
        self,
        account: TradingAccount,
        trades: Sequence[TradeRecord],
        now: Optional[datetime] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> JournalStats:
        config = self.config_for(account, overrides)
        return calculate_journal_stats(
            trades, account.account_size, account.max_daily_drawdown_pct, now, config.journal
        )

    def health_check(self) -> dict[str, Any]:
        return {
            "flag_store": self.flag_store.health_check(),
            "delivery": self.dispatcher.health_check(),
        }

    def get_runtime_stats(self) -> dict[str, Any]:
        """Get runtime statistics."""
        with self._stats_lock:
            counts = {
                "refreshes": self._refresh_count,
                "notifications": self._notification_count,
                "degraded_refreshes": self._degraded_count,
            }
        counts["delivery"] = self.dispatcher.get_stats()
        return counts

    def shutdown(self, wait: bool = True) -> None:
        """Drain pending notification deliveries."""
        self.dispatcher.shutdown(wait=wait)
        self.logger.info("Risk compliance engine shut down")
