"""Funded-account payout projection."""

from dataclasses import dataclass
from typing import Any, Optional

from ..config.defaults import PayoutParams
from ..config.firms import FirmPhase, FirmProfile
from ..data.validators import require_range, validate_account
from ..models.account import TradingAccount


@dataclass(frozen=True)
class PayoutScenario:
    """Monthly earnings at a fixed monthly return."""
    monthly_percent: float
    monthly_profit: float
    trader_cut: float
    yearly_estimate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly_percent": self.monthly_percent,
            "monthly_profit": self.monthly_profit,
            "trader_cut": self.trader_cut,
            "yearly_estimate": self.yearly_estimate,
        }


@dataclass(frozen=True)
class ScalingTier:
    multiplier: float
    new_account_size: float
    potential_payout: float          # Monthly, at the scaling return

    def to_dict(self) -> dict[str, Any]:
        return {
            "multiplier": self.multiplier,
            "new_account_size": self.new_account_size,
            "potential_payout": self.potential_payout,
        }


@dataclass(frozen=True)
class PayoutProjection:
    """Projected payouts and progress toward the funded phase."""
    payout_split_pct: float
    scenarios: tuple
    scaling: tuple
    profit: float
    profit_percent: float
    target_profit: float
    progress_to_target: float        # 0-100
    phases: tuple = ()
    funded_phase: Optional[FirmPhase] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "payout_split_pct": self.payout_split_pct,
            "scenarios": [s.to_dict() for s in self.scenarios],
            "scaling": [t.to_dict() for t in self.scaling],
            "profit": self.profit,
            "profit_percent": self.profit_percent,
            "target_profit": self.target_profit,
            "progress_to_target": self.progress_to_target,
            "phases": [p.to_dict() for p in self.phases],
            "funded_phase": self.funded_phase.to_dict() if self.funded_phase else None,
        }


def project_payouts(
    account: TradingAccount,
    payout_split_pct: Optional[float] = None,
    firm_profile: Optional[FirmProfile] = None,
    params: Optional[PayoutParams] = None
) -> PayoutProjection:
    """
    Project funded-account earnings.

    The payout split is taken from, in order: the explicit argument, the
    firm's funded phase, the policy default.

    Args:
        account: Account snapshot
        payout_split_pct: Trader's share of profits in percent
        firm_profile: Firm phase preset
        params: Payout policy

    Returns:
        PayoutProjection

    Raises:
        InvalidInputError: On unusable account values or a split outside 0-100
    """
    params = params or PayoutParams()
    validate_account(account)

    funded_phase = firm_profile.funded_phase if firm_profile else None
    if payout_split_pct is None:
        if funded_phase is not None and funded_phase.payout_split > 0:
            payout_split_pct = funded_phase.payout_split
        else:
            payout_split_pct = params.payout_split_pct
    split = require_range("payout_split_pct", payout_split_pct, 0.0, 100.0) / 100

    size = account.account_size

    scenarios = []
    for monthly_percent in params.monthly_profit_scenarios:
        monthly_profit = size * (monthly_percent / 100)
        trader_cut = monthly_profit * split
        scenarios.append(PayoutScenario(
            monthly_percent=monthly_percent,
            monthly_profit=monthly_profit,
            trader_cut=trader_cut,
            yearly_estimate=trader_cut * 12,
        ))

    scaling = tuple(
        ScalingTier(
            multiplier=multiplier,
            new_account_size=size * multiplier,
            potential_payout=size * multiplier * (params.scaling_monthly_return_pct / 100) * split,
        )
        for multiplier in params.scaling_multipliers
    )

    profit = account.current_balance - size
    target_profit = size * (account.profit_target_pct / 100)

    return PayoutProjection(
        payout_split_pct=split * 100,
        scenarios=tuple(scenarios),
        scaling=scaling,
        profit=profit,
        profit_percent=profit / size * 100,
        target_profit=target_profit,
        progress_to_target=min(100.0, max(0.0, profit / target_profit * 100)),
        phases=firm_profile.phases if firm_profile else (),
        funded_phase=funded_phase,
    )
