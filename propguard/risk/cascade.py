"""
Loss-cascade simulator.

Projects a run of consecutive full-risk losses from the current balance and
classifies each step against the daily and total breach levels.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import accumulate, repeat
from typing import Any, Optional

from ..config.defaults import CascadeParams
from ..data.validators import require_finite, require_non_negative, require_positive, require_range
from ..errors import OutOfRangeError


class CascadeStatus(str, Enum):
    """Classification of a balance after ``n`` consecutive losses."""
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    DAILY_BREACH = "daily_breach"
    TOTAL_BREACH = "total_breach"


@dataclass(frozen=True)
class CascadeStep:
    """Balance after ``losses`` consecutive losses."""
    losses: int
    balance: float
    daily_breach: bool
    total_breach: bool
    status: CascadeStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "losses": self.losses,
            "balance": self.balance,
            "daily_breach": self.daily_breach,
            "total_breach": self.total_breach,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class CascadeProjection:
    """Result of a loss-cascade simulation."""
    starting_balance: float
    risk_amount: float
    daily_breach_level: float
    total_breach_level: float
    steps: tuple
    losses_to_daily_breach: Optional[int]    # 1-indexed, None if not reached
    losses_to_total_breach: Optional[int]

    @property
    def affordable_losses(self) -> Optional[int]:
        """Losses that can be taken without breaching either limit."""
        reached = [n for n in (self.losses_to_daily_breach, self.losses_to_total_breach) if n is not None]
        if not reached:
            return None
        return min(reached) - 1

    def scenario(self, losses: int) -> CascadeStep:
        """Step after ``losses`` consecutive losses (1-indexed)."""
        if not 1 <= losses <= len(self.steps):
            raise OutOfRangeError(
                f"losses must be in [1, {len(self.steps)}], got {losses}",
                minimum=1, maximum=len(self.steps), field="losses", value=losses
            )
        return self.steps[losses - 1]

    def cumulative_loss(self, losses: int) -> float:
        """Amount lost after ``losses`` consecutive losses."""
        return self.starting_balance - self.scenario(losses).balance

    def to_dict(self) -> dict[str, Any]:
        return {
            "starting_balance": self.starting_balance,
            "risk_amount": self.risk_amount,
            "daily_breach_level": self.daily_breach_level,
            "total_breach_level": self.total_breach_level,
            "steps": [s.to_dict() for s in self.steps],
            "losses_to_daily_breach": self.losses_to_daily_breach,
            "losses_to_total_breach": self.losses_to_total_breach,
            "affordable_losses": self.affordable_losses,
        }


def classify_step(
    balance: float,
    daily_breach_level: float,
    total_breach_level: float,
    risk_amount: float,
    params: CascadeParams
) -> CascadeStatus:
    """Status precedence: total breach, daily breach, danger, warning, safe."""
    if balance <= total_breach_level:
        return CascadeStatus.TOTAL_BREACH
    if balance <= daily_breach_level:
        return CascadeStatus.DAILY_BREACH
    if balance <= daily_breach_level + risk_amount * params.danger_losses:
        return CascadeStatus.DANGER
    if balance <= daily_breach_level + risk_amount * params.warning_losses:
        return CascadeStatus.WARNING
    return CascadeStatus.SAFE


def simulate_loss_cascade(
    current_balance: float,
    account_size: float,
    max_daily_drawdown_pct: float,
    max_total_drawdown_pct: float,
    risk_per_trade_pct: float,
    lot_size_multiplier: float = 1.0,
    steps: Optional[int] = None,
    params: Optional[CascadeParams] = None
) -> CascadeProjection:
    """
    Simulate ``steps`` consecutive losses of a fixed risk amount.

    The risk amount is fixed at ``current * risk% * multiplier`` and each step
    subtracts it from the previous balance. The daily breach level is taken
    relative to the current balance, the total breach level relative to the
    initial account size.

    Args:
        current_balance: Balance before the cascade
        account_size: Initial capital
        max_daily_drawdown_pct: Daily limit in percent
        max_total_drawdown_pct: Total limit in percent
        risk_per_trade_pct: Risk per trade in percent of the current balance
        lot_size_multiplier: Scales the risk amount
        steps: Number of losses to simulate (defaults to policy)
        params: Cascade policy

    Returns:
        CascadeProjection with one step per simulated loss

    Raises:
        InvalidInputError: On non-positive sizes, limits or step counts
    """
    params = params or CascadeParams()
    steps = params.steps if steps is None else steps

    current_balance = require_finite("current_balance", current_balance)
    account_size = require_positive("account_size", account_size)
    max_daily_drawdown_pct = require_positive("max_daily_drawdown_pct", max_daily_drawdown_pct)
    max_total_drawdown_pct = require_positive("max_total_drawdown_pct", max_total_drawdown_pct)
    risk_per_trade_pct = require_non_negative("risk_per_trade_pct", risk_per_trade_pct)
    lot_size_multiplier = require_non_negative("lot_size_multiplier", lot_size_multiplier)
    steps = int(require_range("steps", steps, 1))

    risk_amount = current_balance * (risk_per_trade_pct / 100) * lot_size_multiplier
    daily_breach_level = current_balance - current_balance * (max_daily_drawdown_pct / 100)
    total_breach_level = account_size - account_size * (max_total_drawdown_pct / 100)

    balances = accumulate(repeat(risk_amount, steps), lambda balance, loss: balance - loss,
                          initial=current_balance)
    next(balances)  # starting balance

    cascade = tuple(
        CascadeStep(
            losses=index,
            balance=balance,
            daily_breach=balance <= daily_breach_level,
            total_breach=balance <= total_breach_level,
            status=classify_step(balance, daily_breach_level, total_breach_level, risk_amount, params),
        )
        for index, balance in enumerate(balances, start=1)
    )

    return CascadeProjection(
        starting_balance=current_balance,
        risk_amount=risk_amount,
        daily_breach_level=daily_breach_level,
        total_breach_level=total_breach_level,
        steps=cascade,
        losses_to_daily_breach=next((s.losses for s in cascade if s.daily_breach), None),
        losses_to_total_breach=next((s.losses for s in cascade if s.total_breach), None),
    )
