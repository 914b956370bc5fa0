"""Account drawdown metrics and journal statistics"""

from .account import (
    AccountMetrics,
    DrawdownZone,
    calculate_account_metrics,
    calculate_used_percent,
    classify_drawdown_zone,
    suggest_recovery_risk,
)
from .journal import JournalStats, calculate_journal_stats

__all__ = [
    "AccountMetrics",
    "DrawdownZone",
    "calculate_account_metrics",
    "calculate_used_percent",
    "classify_drawdown_zone",
    "suggest_recovery_risk",
    "JournalStats",
    "calculate_journal_stats",
]
