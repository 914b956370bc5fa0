"""Risk compliance statistics over recent journal trades"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..config.defaults import JournalParams
from ..data.validators import require_positive
from ..models.journal import TradeRecord
from ..utils.time import days_ago, ensure_utc, start_of_day, utc_now


@dataclass(frozen=True)
class JournalTradeCompliance:
    """A journal trade annotated with its risk compliance."""
    trade: TradeRecord
    risk_compliant: bool
    risk_percent: float              # |P&L| as percent of account size

    def to_dict(self) -> dict[str, Any]:
        return {
            "profit_loss": self.trade.profit_loss,
            "result": self.trade.result.value if self.trade.result else None,
            "created_at": self.trade.created_at.isoformat(),
            "risk_compliant": self.risk_compliant,
            "risk_percent": self.risk_percent,
        }


@dataclass(frozen=True)
class JournalStats:
    """Today / this week journal summary against the daily limit."""
    today_trades: int
    today_pnl: float
    week_trades: int
    week_pnl: float
    compliance_rate: float           # Percent of compliant trades, 100 when empty
    avg_risk_percent: float
    daily_limit_used: float          # |today's P&L| as percent of the daily limit
    trades: tuple = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "today_trades": self.today_trades,
            "today_pnl": self.today_pnl,
            "week_trades": self.week_trades,
            "week_pnl": self.week_pnl,
            "compliance_rate": self.compliance_rate,
            "avg_risk_percent": self.avg_risk_percent,
            "daily_limit_used": self.daily_limit_used,
            "trades": [t.to_dict() for t in self.trades],
        }


def calculate_journal_stats(
    trades: Sequence[TradeRecord],
    account_size: float,
    max_daily_drawdown_pct: float,
    now: Optional[datetime] = None,
    params: Optional[JournalParams] = None
) -> JournalStats:
    """
    Summarise recent journal trades against the daily drawdown limit.

    A trade is compliant when its absolute P&L stays within a fixed fraction
    (10% by default) of the daily limit amount. Trades older than the
    lookback window are ignored and at most ``max_trades`` of the most recent
    ones are considered.

    Args:
        trades: Journal trades in any order
        account_size: Initial capital
        max_daily_drawdown_pct: Daily limit in percent of account size
        now: Evaluation instant (defaults to wall-clock UTC)
        params: Journal policy

    Returns:
        JournalStats summary
    """
    params = params or JournalParams()
    account_size = require_positive("account_size", account_size)
    max_daily_drawdown_pct = require_positive("max_daily_drawdown_pct", max_daily_drawdown_pct)

    current = utc_now(now)
    week_start = days_ago(params.lookback_days, current)
    today_start = start_of_day(current)

    # Naive timestamps are read as UTC
    stamped = sorted(
        ((ensure_utc(t.created_at), t) for t in trades),
        key=lambda pair: pair[0],
        reverse=True,
    )
    stamped = [(created, t) for created, t in stamped if created >= week_start][:params.max_trades]
    recent = [t for _, t in stamped]

    daily_limit = account_size * (max_daily_drawdown_pct / 100)
    compliance_cap = daily_limit * params.compliant_fraction_of_daily_limit

    annotated = tuple(
        JournalTradeCompliance(
            trade=t,
            risk_compliant=abs(t.profit_loss or 0.0) <= compliance_cap,
            risk_percent=abs(t.profit_loss or 0.0) / account_size * 100,
        )
        for t in recent
    )

    today = [t for created, t in stamped if created >= today_start]
    today_pnl = sum(t.profit_loss or 0.0 for t in today)
    week_pnl = sum(t.profit_loss or 0.0 for t in recent)

    if annotated:
        compliance_rate = sum(1 for a in annotated if a.risk_compliant) / len(annotated) * 100
        avg_risk = sum(a.risk_percent for a in annotated) / len(annotated)
    else:
        compliance_rate = 100.0
        avg_risk = 0.0

    return JournalStats(
        today_trades=len(today),
        today_pnl=today_pnl,
        week_trades=len(recent),
        week_pnl=week_pnl,
        compliance_rate=compliance_rate,
        avg_risk_percent=avg_risk,
        daily_limit_used=abs(today_pnl) / daily_limit * 100,
        trades=annotated,
    )
