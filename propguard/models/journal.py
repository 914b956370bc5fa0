"""
Trading journal models: closed/open trades and daily mental-state check-ins.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Mood(str, Enum):
    """Self-reported mood from the daily check-in."""
    EXCITED = "excited"
    CONFIDENT = "confident"
    FOCUSED = "focused"
    CALM = "calm"
    NEUTRAL = "neutral"
    ANXIOUS = "anxious"
    FRUSTRATED = "frustrated"
    TIRED = "tired"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Mood":
        """Map a stored mood string to a Mood, unknown values become NEUTRAL."""
        if isinstance(value, Mood):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NEUTRAL


POSITIVE_MOODS = frozenset({Mood.EXCITED, Mood.CONFIDENT, Mood.FOCUSED})
NEGATIVE_MOODS = frozenset({Mood.ANXIOUS, Mood.FRUSTRATED, Mood.TIRED})


class TradeResult(str, Enum):
    """Outcome recorded on a journal trade."""
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"
    OPEN = "open"


@dataclass(frozen=True)
class CheckIn:
    """Daily mental-state check-in."""
    mood: Mood
    confidence: int          # 1-10
    stress: int              # 1-10
    focus_level: int         # 1-10
    sleep_hours: float       # 0-24
    date: Optional[date] = None


@dataclass(frozen=True)
class TradeRecord:
    """Journal trade as stored by the data store."""
    profit_loss: Optional[float]
    result: Optional[TradeResult]
    created_at: datetime

    @property
    def is_loss(self) -> bool:
        return self.result == TradeResult.LOSS

    @property
    def is_win(self) -> bool:
        return self.result == TradeResult.WIN
