"""Drawdown exposure metrics for a trading account"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..config.defaults import DrawdownZoneParams, RecoveryRiskParams
from ..data.validators import validate_account
from ..models.account import TradingAccount


class DrawdownZone(str, Enum):
    """Total-drawdown progress zone."""
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"
    CRITICAL = "critical"


ZONE_LABELS = {
    DrawdownZone.SAFE: "Safe Zone",
    DrawdownZone.CAUTION: "Caution",
    DrawdownZone.DANGER: "Danger Zone",
    DrawdownZone.CRITICAL: "Critical",
}


@dataclass(frozen=True)
class AccountMetrics:
    """Drawdown usage of an account against its daily and total limits."""
    daily_used_percent: float        # >= 0, 100 at the daily breach level
    total_used_percent: float        # >= 0, 100 at the total breach level
    daily_remaining: float           # <= 0 once the daily limit is breached
    total_remaining: float           # <= 0 once the total limit is breached

    daily_limit_amount: float
    total_limit_amount: float
    daily_breach_level: float        # Balance at which the daily limit is hit
    minimum_balance: float           # Balance at which the total limit is hit

    drawdown_zone: DrawdownZone
    drawdown_progress: float         # total_used_percent clamped to 0-100
    recovery_percentage: float       # Drawdown from initial capital, percent
    suggested_risk_pct: float

    @property
    def effective_remaining(self) -> float:
        """The tighter of the two remaining loss budgets."""
        return min(self.daily_remaining, self.total_remaining)

    @property
    def daily_breached(self) -> bool:
        return self.daily_remaining <= 0

    @property
    def total_breached(self) -> bool:
        return self.total_remaining <= 0

    @property
    def in_recovery(self) -> bool:
        return self.recovery_percentage > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "daily_used_percent": self.daily_used_percent,
            "total_used_percent": self.total_used_percent,
            "daily_remaining": self.daily_remaining,
            "total_remaining": self.total_remaining,
            "effective_remaining": self.effective_remaining,
            "daily_limit_amount": self.daily_limit_amount,
            "total_limit_amount": self.total_limit_amount,
            "daily_breach_level": self.daily_breach_level,
            "minimum_balance": self.minimum_balance,
            "daily_breached": self.daily_breached,
            "total_breached": self.total_breached,
            "drawdown_zone": self.drawdown_zone.value,
            "drawdown_zone_label": ZONE_LABELS[self.drawdown_zone],
            "drawdown_progress": self.drawdown_progress,
            "recovery_percentage": self.recovery_percentage,
            "suggested_risk_pct": self.suggested_risk_pct,
        }


def calculate_used_percent(base_balance: float, current_balance: float, limit_pct: float) -> float:
    """
    Share of a drawdown limit consumed, in percent.

    used = (base - current) / (base * limit_pct / 100) * 100, floored at 0.
    """
    limit_amount = base_balance * (limit_pct / 100)
    used = (base_balance - current_balance) / limit_amount * 100
    return max(0.0, used)


def classify_drawdown_zone(progress: float, params: Optional[DrawdownZoneParams] = None) -> DrawdownZone:
    """Map total-drawdown progress (0-100) to a zone."""
    params = params or DrawdownZoneParams()

    if progress < params.caution_at:
        return DrawdownZone.SAFE
    if progress < params.danger_at:
        return DrawdownZone.CAUTION
    if progress < params.critical_at:
        return DrawdownZone.DANGER
    return DrawdownZone.CRITICAL


def suggest_recovery_risk(recovery_percentage: float, params: Optional[RecoveryRiskParams] = None) -> float:
    """Suggested risk per trade (percent) for a given drawdown depth."""
    params = params or RecoveryRiskParams()

    if recovery_percentage > params.deep_drawdown_pct:
        return params.deep_risk_pct
    if recovery_percentage > params.moderate_drawdown_pct:
        return params.moderate_risk_pct
    if recovery_percentage > 0:
        return params.shallow_risk_pct
    return params.default_risk_pct


def calculate_account_metrics(
    account: TradingAccount,
    zone_params: Optional[DrawdownZoneParams] = None,
    recovery_params: Optional[RecoveryRiskParams] = None
) -> AccountMetrics:
    """
    Derive daily and total drawdown usage from an account snapshot.

    The daily limit is measured against the day start balance, the total
    limit against the initial account size. Remaining amounts go negative
    once a limit is breached; consumers must treat them as exhausted.

    Args:
        account: Account snapshot
        zone_params: Drawdown zone ladder
        recovery_params: Recovery risk suggestion ladder

    Returns:
        AccountMetrics for the snapshot

    Raises:
        InvalidInputError: If sizes or limits are not positive
    """
    validate_account(account)

    daily_limit_amount = account.day_start_balance * (account.max_daily_drawdown_pct / 100)
    total_limit_amount = account.account_size * (account.max_total_drawdown_pct / 100)

    daily_loss = account.day_start_balance - account.current_balance
    total_loss = account.account_size - account.current_balance

    total_used = calculate_used_percent(
        account.account_size, account.current_balance, account.max_total_drawdown_pct
    )
    progress = min(100.0, total_used)
    recovery_percentage = max(0.0, total_loss / account.account_size * 100)

    return AccountMetrics(
        daily_used_percent=calculate_used_percent(
            account.day_start_balance, account.current_balance, account.max_daily_drawdown_pct
        ),
        total_used_percent=total_used,
        daily_remaining=daily_limit_amount - daily_loss,
        total_remaining=total_limit_amount - total_loss,
        daily_limit_amount=daily_limit_amount,
        total_limit_amount=total_limit_amount,
        daily_breach_level=account.day_start_balance - daily_limit_amount,
        minimum_balance=account.account_size - total_limit_amount,
        drawdown_zone=classify_drawdown_zone(progress, zone_params),
        drawdown_progress=progress,
        recovery_percentage=recovery_percentage,
        suggested_risk_pct=suggest_recovery_risk(recovery_percentage, recovery_params),
    )
