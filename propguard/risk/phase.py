"""Challenge phase progress projection."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from ..config.defaults import PhaseParams
from ..data.validators import require_range, validate_account
from ..models.account import TradingAccount
from ..utils.time import DateLike, SECONDS_PER_DAY, ensure_utc, utc_now


class PhaseStatus(str, Enum):
    TARGET_REACHED = "target_reached"
    BREACHED = "breached"
    ON_TRACK = "on_track"
    AGGRESSIVE_NEEDED = "aggressive_needed"
    BEHIND = "behind"


STATUS_MESSAGES = {
    PhaseStatus.TARGET_REACHED: "Target Reached! Ready for next phase",
    PhaseStatus.BREACHED: "Account Breached",
    PhaseStatus.ON_TRACK: "On track to pass",
    PhaseStatus.AGGRESSIVE_NEEDED: "Aggressive strategy needed",
    PhaseStatus.BEHIND: "Slightly behind schedule",
}


@dataclass(frozen=True)
class PhaseProgress:
    """Progress through a time-boxed challenge phase."""
    profit_target: float
    current_profit: float
    profit_progress: float           # 0-100
    start_date: datetime
    end_date: datetime
    total_days: int
    days_elapsed: int
    days_remaining: int
    time_progress: float             # <= 100
    on_track: bool
    daily_target_needed: float
    breach_level: float
    safety_buffer: float
    safety_progress: float           # 0-100, 100 with no drawdown
    status: PhaseStatus

    @property
    def status_message(self) -> str:
        return STATUS_MESSAGES[self.status]

    def to_dict(self) -> dict[str, Any]:
        return {
            "profit_target": self.profit_target,
            "current_profit": self.current_profit,
            "profit_progress": self.profit_progress,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_days": self.total_days,
            "days_elapsed": self.days_elapsed,
            "days_remaining": self.days_remaining,
            "time_progress": self.time_progress,
            "on_track": self.on_track,
            "daily_target_needed": self.daily_target_needed,
            "breach_level": self.breach_level,
            "safety_buffer": self.safety_buffer,
            "safety_progress": self.safety_progress,
            "status": self.status.value,
            "status_message": self.status_message,
        }


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def project_phase_progress(
    account: TradingAccount,
    start_date: DateLike,
    total_days: Optional[int] = None,
    now: Optional[datetime] = None,
    params: Optional[PhaseParams] = None
) -> PhaseProgress:
    """
    Project progress through a challenge phase.

    Args:
        account: Account snapshot; its profit target applies to this phase
        start_date: Phase start (datetime, date or ISO string)
        total_days: Phase length (defaults to policy)
        now: Evaluation instant (defaults to wall-clock UTC)
        params: Phase policy

    Returns:
        PhaseProgress

    Raises:
        InvalidInputError: On unusable account values or a non-positive
            phase length
    """
    params = params or PhaseParams()
    validate_account(account)
    total_days = int(require_range(
        "total_days", params.challenge_days if total_days is None else total_days, 1
    ))

    start = ensure_utc(start_date)
    current = utc_now(now)

    profit_target = account.account_size * (account.profit_target_pct / 100)
    current_profit = account.current_balance - account.account_size
    profit_progress = _clamp(current_profit / profit_target * 100)

    elapsed = int((current - start).total_seconds() // SECONDS_PER_DAY)
    days_remaining = max(0, total_days - elapsed)
    time_progress = min(100.0, elapsed / total_days * 100)
    on_track = profit_progress >= time_progress * params.on_track_slack

    remaining_profit = max(0.0, profit_target - current_profit)
    daily_target_needed = remaining_profit / max(days_remaining, 1)

    total_limit = account.account_size * (account.max_total_drawdown_pct / 100)
    breach_level = account.account_size - total_limit
    safety_progress = _clamp(100 - (account.account_size - account.current_balance) / total_limit * 100)

    if profit_progress >= 100:
        status = PhaseStatus.TARGET_REACHED
    elif account.current_balance <= breach_level:
        status = PhaseStatus.BREACHED
    elif on_track:
        status = PhaseStatus.ON_TRACK
    elif days_remaining < params.urgent_days_remaining and profit_progress < params.urgent_progress_pct:
        status = PhaseStatus.AGGRESSIVE_NEEDED
    else:
        status = PhaseStatus.BEHIND

    return PhaseProgress(
        profit_target=profit_target,
        current_profit=current_profit,
        profit_progress=profit_progress,
        start_date=start,
        end_date=start + timedelta(days=total_days),
        total_days=total_days,
        days_elapsed=elapsed,
        days_remaining=days_remaining,
        time_progress=time_progress,
        on_track=on_track,
        daily_target_needed=daily_target_needed,
        breach_level=breach_level,
        safety_buffer=account.current_balance - breach_level,
        safety_progress=safety_progress,
        status=status,
    )
