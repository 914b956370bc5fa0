"""
Account and trade proposal models.

Amounts are in account currency, percentages are whole percents (5.0 means 5%).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    """Trade direction."""
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class TradingAccount:
    """Snapshot of a prop-firm account and its limits."""
    account_size: float              # Initial capital
    current_balance: float
    day_start_balance: float         # Balance at start of the trading day
    max_daily_drawdown_pct: float    # Daily limit, percent of day start balance
    max_total_drawdown_pct: float    # Total limit, percent of initial capital
    profit_target_pct: float = 10.0

    account_id: Optional[str] = None
    name: Optional[str] = None
    firm: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.account_id or "Account"

    def with_balance(self, current_balance: float) -> "TradingAccount":
        """Copy of this snapshot with a new current balance."""
        return TradingAccount(
            account_size=self.account_size,
            current_balance=current_balance,
            day_start_balance=self.day_start_balance,
            max_daily_drawdown_pct=self.max_daily_drawdown_pct,
            max_total_drawdown_pct=self.max_total_drawdown_pct,
            profit_target_pct=self.profit_target_pct,
            account_id=self.account_id,
            name=self.name,
            firm=self.firm,
        )


@dataclass(frozen=True)
class ProposedTrade:
    """A trade the trader is about to submit."""
    pair: str
    direction: Direction
    lot_size: float
    stop_loss_pips: float
    pip_value: float = 10.0          # Currency per pip per lot

    @property
    def potential_loss(self) -> float:
        """Loss if the stop is hit."""
        return self.lot_size * self.stop_loss_pips * self.pip_value
