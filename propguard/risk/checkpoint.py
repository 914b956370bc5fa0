"""
Pre-trade checkpoint.

Evaluates a proposed trade against the remaining daily and total loss
budgets before it is submitted. The two breach checks are critical and close
the gate; the remaining checks only raise the risk level.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..config.defaults import CheckpointParams
from ..data.validators import require_finite, validate_account, validate_trade
from ..errors import TradeBlockedError
from ..logging.config import get_checkpoint_logger, log_check_decision
from ..metrics.account import calculate_account_metrics
from ..models.account import ProposedTrade, TradingAccount

logger = get_checkpoint_logger(__name__)


class RiskLevel(str, Enum):
    """Overall risk of a proposed trade."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class RiskCheck:
    """A single checklist item."""
    label: str
    passed: bool
    critical: bool

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "passed": self.passed, "critical": self.critical}


@dataclass(frozen=True)
class RiskAssessment:
    """Checklist outcome for a proposed trade."""
    risk_level: RiskLevel
    checks: tuple
    warnings: tuple
    potential_loss: float
    percent_of_daily: float          # inf when the daily budget is exhausted
    percent_of_total: float          # inf when the total budget is exhausted
    risk_percent: float              # Potential loss as percent of current balance

    @property
    def all_critical_passed(self) -> bool:
        return all(check.passed for check in self.checks if check.critical)

    @property
    def failed_checks(self) -> list[RiskCheck]:
        return [check for check in self.checks if not check.passed]

    def can_proceed(self, acknowledged: bool = False) -> bool:
        """Gate: every critical check passed, and a critical level was acknowledged."""
        return self.all_critical_passed and (self.risk_level != RiskLevel.CRITICAL or acknowledged)

    def to_dict(self) -> dict[str, Any]:
        def finite_or_none(value: float) -> Optional[float]:
            return value if math.isfinite(value) else None

        return {
            "risk_level": self.risk_level.value,
            "checks": [c.to_dict() for c in self.checks],
            "warnings": list(self.warnings),
            "potential_loss": self.potential_loss,
            "percent_of_daily": finite_or_none(self.percent_of_daily),
            "percent_of_total": finite_or_none(self.percent_of_total),
            "risk_percent": finite_or_none(self.risk_percent),
            "can_proceed": self.can_proceed(),
        }


def _percent_of(amount: float, budget: float) -> float:
    """``amount`` as percent of ``budget``; an exhausted budget yields inf."""
    if budget <= 0:
        return math.inf
    return amount / budget * 100


def _format_pct(value: float) -> str:
    return f"{value:g}"


def assess_trade(
    trade: ProposedTrade,
    account: TradingAccount,
    daily_remaining: Optional[float] = None,
    total_remaining: Optional[float] = None,
    params: Optional[CheckpointParams] = None
) -> RiskAssessment:
    """
    Run the pre-trade checklist.

    Args:
        trade: Proposed trade
        account: Account snapshot
        daily_remaining: Remaining daily loss budget (computed from the
            account when omitted)
        total_remaining: Remaining total loss budget (computed from the
            account when omitted)
        params: Checkpoint thresholds

    Returns:
        RiskAssessment with the ordered checks

    Raises:
        InvalidInputError: On non-positive lot size, stop, pip value or
            unusable account values
    """
    params = params or CheckpointParams()
    validate_trade(trade)
    validate_account(account)

    if daily_remaining is None or total_remaining is None:
        metrics = calculate_account_metrics(account)
        daily_remaining = metrics.daily_remaining if daily_remaining is None else daily_remaining
        total_remaining = metrics.total_remaining if total_remaining is None else total_remaining

    daily_remaining = require_finite("daily_remaining", daily_remaining)
    total_remaining = require_finite("total_remaining", total_remaining)

    potential_loss = trade.potential_loss
    percent_of_daily = _percent_of(potential_loss, daily_remaining)
    percent_of_total = _percent_of(potential_loss, total_remaining)
    risk_percent = _percent_of(potential_loss, account.current_balance)

    checks = []
    warnings = []

    daily_breach_risk = potential_loss >= daily_remaining
    checks.append(RiskCheck("Trade won't breach daily limit", not daily_breach_risk, True))
    if daily_breach_risk:
        warnings.append("This trade could breach your daily drawdown limit!")

    total_breach_risk = potential_loss >= total_remaining
    checks.append(RiskCheck("Trade won't breach total limit", not total_breach_risk, True))
    if total_breach_risk:
        warnings.append("This trade could breach your total drawdown limit!")

    reasonable_risk = risk_percent <= params.max_risk_per_trade_pct
    risk_label = f"{risk_percent:.2f}%" if math.isfinite(risk_percent) else "n/a"
    checks.append(RiskCheck(f"Risk per trade is reasonable ({risk_label})", reasonable_risk, False))
    if not reasonable_risk:
        high_label = f"{risk_percent:.1f}%" if math.isfinite(risk_percent) else "all"
        warnings.append(f"High risk: {high_label} of account on one trade")

    minimum_balance = account.account_size * (1 - account.max_total_drawdown_pct / 100)
    after_loss_buffer = (account.current_balance - potential_loss) - minimum_balance
    checks.append(RiskCheck("Leaves room for recovery trades", after_loss_buffer > potential_loss, False))

    within_daily_budget = percent_of_daily <= params.daily_budget_high_pct
    checks.append(RiskCheck(
        f"Uses less than {_format_pct(params.daily_budget_high_pct)}% of daily limit",
        within_daily_budget,
        False
    ))

    if daily_breach_risk or total_breach_risk:
        risk_level = RiskLevel.CRITICAL
    elif percent_of_daily > params.daily_budget_high_pct or not reasonable_risk:
        risk_level = RiskLevel.HIGH
    elif percent_of_daily > params.daily_budget_medium_pct:
        risk_level = RiskLevel.MEDIUM
    else:
        risk_level = RiskLevel.LOW

    return RiskAssessment(
        risk_level=risk_level,
        checks=tuple(checks),
        warnings=tuple(warnings),
        potential_loss=potential_loss,
        percent_of_daily=percent_of_daily,
        percent_of_total=percent_of_total,
        risk_percent=risk_percent,
    )


class PreTradeCheckpoint:
    """Audited gate in front of trade submission."""

    def __init__(self, params: Optional[CheckpointParams] = None):
        self.params = params or CheckpointParams()
        self.logger = logger

    def assess(
        self,
        trade: ProposedTrade,
        account: TradingAccount,
        daily_remaining: Optional[float] = None,
        total_remaining: Optional[float] = None
    ) -> RiskAssessment:
        """Assess a trade and write every check outcome to the audit log."""
        assessment = assess_trade(trade, account, daily_remaining, total_remaining, self.params)

        context = {
            "account_id": account.account_id,
            "pair": trade.pair,
            "direction": trade.direction.value,
            "potential_loss": assessment.potential_loss,
        }
        for check in assessment.checks:
            log_check_decision(
                self.logger,
                check_name=check.label,
                passed=check.passed,
                critical=check.critical,
                reason=check.label if check.passed else f"Failed: {check.label}",
                context=context,
            )

        self.logger.info(
            "Trade assessed",
            risk_level=assessment.risk_level.value,
            warnings=list(assessment.warnings),
            **context
        )
        return assessment

    def clear_for_submission(self, assessment: RiskAssessment, acknowledged: bool = False) -> None:
        """
        Raise unless the assessment allows the trade.

        Raises:
            TradeBlockedError: If a critical check failed or a critical risk
                level was not acknowledged
        """
        if assessment.can_proceed(acknowledged):
            self.logger.info("Trade cleared for submission", risk_level=assessment.risk_level.value,
                             acknowledged=acknowledged)
            return

        failed = [check.label for check in assessment.failed_checks if check.critical]
        self.logger.warning(
            "Trade submission blocked",
            risk_level=assessment.risk_level.value,
            failed_checks=failed,
            acknowledged=acknowledged
        )
        raise TradeBlockedError(
            f"Trade blocked at {assessment.risk_level.value} risk",
            risk_level=assessment.risk_level.value,
            failed_checks=failed,
            context={"warnings": list(assessment.warnings)}
        )
