"""Drawdown recovery planner."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..config.defaults import RecoveryParams, RecoveryProfileParams
from ..data.validators import require_non_negative, validate_account
from ..models.account import TradingAccount


class RecoveryRiskStatus(str, Enum):
    """Remaining total-drawdown buffer classification."""
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"


@dataclass(frozen=True)
class RecoveryStrategy:
    """Schedule for winning back the drawdown under one risk profile."""
    name: str
    days_to_recover: Optional[int]   # None when no risk can be taken
    trades_per_day: int
    risk_per_trade_pct: float
    win_rate_needed: float
    avg_rr_needed: float
    trades_needed: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "days_to_recover": self.days_to_recover,
            "trades_per_day": self.trades_per_day,
            "risk_per_trade_pct": self.risk_per_trade_pct,
            "win_rate_needed": self.win_rate_needed,
            "avg_rr_needed": self.avg_rr_needed,
            "trades_needed": self.trades_needed,
        }


@dataclass(frozen=True)
class Milestone:
    day: int
    target_balance: float
    percent_recovered: float
    daily_gain: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "target_balance": self.target_balance,
            "percent_recovered": self.percent_recovered,
            "daily_gain": self.daily_gain,
        }


@dataclass(frozen=True)
class RecoveryPlan:
    """
    Recovery plan for an account.

    Accounts at or above their initial capital take the healthy branch: only
    ``profit`` and ``growth_percent`` are meaningful and no strategies or
    milestones are produced.
    """
    in_drawdown: bool
    drawdown_amount: float
    drawdown_percent: float
    remaining_buffer: float
    buffer_percent: float
    risk_status: RecoveryRiskStatus
    safe_risk_pct: float
    strategies: tuple = ()
    milestones: tuple = ()
    daily_recovery_target: float = 0.0
    profit: float = 0.0
    growth_percent: float = 0.0

    @property
    def healthy(self) -> bool:
        return not self.in_drawdown

    def strategy(self, name: str) -> Optional[RecoveryStrategy]:
        return next((s for s in self.strategies if s.name == name), None)

    @property
    def conservative(self) -> Optional[RecoveryStrategy]:
        return self.strategy("conservative")

    @property
    def moderate(self) -> Optional[RecoveryStrategy]:
        return self.strategy("moderate")

    @property
    def aggressive(self) -> Optional[RecoveryStrategy]:
        return self.strategy("aggressive")

    def to_dict(self) -> dict[str, Any]:
        return {
            "in_drawdown": self.in_drawdown,
            "drawdown_amount": self.drawdown_amount,
            "drawdown_percent": self.drawdown_percent,
            "remaining_buffer": self.remaining_buffer,
            "buffer_percent": self.buffer_percent,
            "risk_status": self.risk_status.value,
            "safe_risk_pct": self.safe_risk_pct,
            "strategies": {s.name: s.to_dict() for s in self.strategies},
            "milestones": [m.to_dict() for m in self.milestones],
            "daily_recovery_target": self.daily_recovery_target,
            "profit": self.profit,
            "growth_percent": self.growth_percent,
        }


def classify_buffer(buffer_percent: float, params: RecoveryParams) -> RecoveryRiskStatus:
    if buffer_percent > params.safe_buffer_pct:
        return RecoveryRiskStatus.SAFE
    if buffer_percent > params.caution_buffer_pct:
        return RecoveryRiskStatus.CAUTION
    return RecoveryRiskStatus.DANGER


def build_strategy(profile: RecoveryProfileParams, current_balance: float,
                   drawdown_amount: float) -> RecoveryStrategy:
    """Winning trades and days needed to recover ``drawdown_amount``."""
    risk_amount = current_balance * (profile.risk_per_trade_pct / 100)
    profit_per_win = risk_amount * profile.reward_to_risk

    if profit_per_win > 0:
        trades_needed = math.ceil(drawdown_amount / profit_per_win)
        days = math.ceil(trades_needed / profile.trades_per_day)
    else:
        trades_needed = None
        days = None

    return RecoveryStrategy(
        name=profile.name,
        days_to_recover=days,
        trades_per_day=profile.trades_per_day,
        risk_per_trade_pct=profile.risk_per_trade_pct,
        win_rate_needed=profile.win_rate_needed,
        avg_rr_needed=profile.reward_to_risk,
        trades_needed=trades_needed,
    )


def build_milestones(current_balance: float, drawdown_amount: float,
                     days_to_recover: Optional[int], max_milestones: int) -> tuple[tuple, float]:
    """Linear daily milestones; returns (milestones, daily target)."""
    if not days_to_recover:
        return (), 0.0

    daily_gain = drawdown_amount / max(days_to_recover, 1)
    milestones = tuple(
        Milestone(
            day=day,
            target_balance=current_balance + daily_gain * day,
            percent_recovered=daily_gain * day / drawdown_amount * 100,
            daily_gain=daily_gain,
        )
        for day in range(1, min(days_to_recover, max_milestones) + 1)
    )
    return milestones, daily_gain


def plan_recovery(
    account: TradingAccount,
    current_risk_pct: Optional[float] = None,
    params: Optional[RecoveryParams] = None
) -> RecoveryPlan:
    """
    Plan a recovery from the current drawdown.

    Each profile sizes its risk amount from the current balance with its own
    risk percent. Milestones follow the milestone profile (conservative by
    default) and are capped.

    Args:
        account: Account snapshot
        current_risk_pct: Trader's usual risk per trade, used for the safe
            risk recommendation
        params: Recovery policy

    Returns:
        RecoveryPlan (healthy branch when at or above initial capital)

    Raises:
        InvalidInputError: On unusable account values
    """
    params = params or RecoveryParams()
    validate_account(account)

    if current_risk_pct is None:
        current_risk_pct = params.max_recovery_risk_pct
    current_risk_pct = require_non_negative("current_risk_pct", current_risk_pct)
    safe_risk_pct = min(current_risk_pct, params.max_recovery_risk_pct)

    drawdown_amount = account.account_size - account.current_balance
    drawdown_percent = drawdown_amount / account.account_size * 100
    total_limit = account.account_size * (account.max_total_drawdown_pct / 100)
    remaining_buffer = total_limit - drawdown_amount
    buffer_percent = remaining_buffer / total_limit * 100
    risk_status = classify_buffer(buffer_percent, params)

    if drawdown_amount <= 0:
        profit = account.current_balance - account.account_size
        return RecoveryPlan(
            in_drawdown=False,
            drawdown_amount=0.0,
            drawdown_percent=0.0,
            remaining_buffer=remaining_buffer,
            buffer_percent=buffer_percent,
            risk_status=risk_status,
            safe_risk_pct=safe_risk_pct,
            profit=profit,
            growth_percent=profit / account.account_size * 100,
        )

    strategies = tuple(
        build_strategy(profile, account.current_balance, drawdown_amount)
        for profile in params.profiles
    )

    milestone_strategy = next(
        (s for s in strategies if s.name == params.milestone_profile),
        strategies[0] if strategies else None
    )
    milestones, daily_target = build_milestones(
        account.current_balance,
        drawdown_amount,
        milestone_strategy.days_to_recover if milestone_strategy else None,
        params.max_milestones,
    )

    return RecoveryPlan(
        in_drawdown=True,
        drawdown_amount=drawdown_amount,
        drawdown_percent=drawdown_percent,
        remaining_buffer=remaining_buffer,
        buffer_percent=buffer_percent,
        risk_status=risk_status,
        safe_risk_pct=safe_risk_pct,
        strategies=strategies,
        milestones=milestones,
        daily_recovery_target=daily_target,
    )
