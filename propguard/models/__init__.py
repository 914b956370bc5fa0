"""
Data models and contracts module.

Immutable value objects for account snapshots, trade proposals, journal
records and mental-state check-ins, as handed in by the surrounding
application.
"""

from .account import Direction, ProposedTrade, TradingAccount
from .journal import CheckIn, Mood, TradeRecord, TradeResult

__all__ = [
    "Direction",
    "ProposedTrade",
    "TradingAccount",
    "CheckIn",
    "Mood",
    "TradeRecord",
    "TradeResult",
]
