"""Breach alert ladder models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..config.defaults import AlertLevelParams


class MetricType(str, Enum):
    """Drawdown metric a flag is attached to."""
    DAILY = "daily"
    TOTAL = "total"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Severity(str, Enum):
    """Notification severity."""
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"


class FlagState(str, Enum):
    """Persisted notification flag state. ``FIRED`` is stored as ``notified=True``."""
    ARMED = "armed"
    FIRED = "fired"

    @classmethod
    def from_notified(cls, notified: bool) -> "FlagState":
        return cls.FIRED if notified else cls.ARMED


def format_threshold(threshold: float) -> str:
    """50.0 -> "50", 62.5 -> "62.5"."""
    return str(int(threshold)) if float(threshold).is_integer() else str(threshold)


@dataclass(frozen=True)
class BreachNotification:
    """A threshold crossing that won its flag and was handed to the sink."""
    account_id: str
    metric_type: MetricType
    threshold: float
    severity: Severity
    used_percent: float
    remaining: float
    title: str
    body: str
    tag: str
    require_interaction: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "metric_type": self.metric_type.value,
            "threshold": self.threshold,
            "severity": self.severity.value,
            "used_percent": self.used_percent,
            "remaining": self.remaining,
            "title": self.title,
            "body": self.body,
            "tag": self.tag,
            "require_interaction": self.require_interaction,
        }


@dataclass(frozen=True)
class ActiveAlert:
    """A ladder level currently reached by daily or total usage."""
    threshold: float
    severity: Severity
    message: str
    metric_types: tuple = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "threshold": self.threshold,
            "severity": self.severity.value,
            "message": self.message,
            "metric_types": [m.value for m in self.metric_types],
        }


@dataclass
class AlertSession:
    """
    Per-session dismissal state.

    Dismissing hides an active alert in this session only. Persisted flags are
    untouched, so a fresh crossing still notifies.
    """
    dismissed: set = field(default_factory=set)

    def dismiss(self, threshold: float) -> None:
        self.dismissed.add(float(threshold))

    def is_dismissed(self, threshold: float) -> bool:
        return float(threshold) in self.dismissed

    def clear(self) -> None:
        self.dismissed.clear()


@dataclass(frozen=True)
class LadderEvaluation:
    """Outcome of one ladder refresh."""
    account_id: str
    daily_used_percent: float
    total_used_percent: float
    daily_level: Optional[AlertLevelParams]
    total_level: Optional[AlertLevelParams]
    notifications: tuple = ()
    active_alerts: tuple = ()
    degraded: bool = False

    @property
    def highest_severity(self) -> Optional[Severity]:
        levels = [lvl for lvl in (self.daily_level, self.total_level) if lvl is not None]
        if not levels:
            return None
        return Severity(max(levels, key=lambda lvl: lvl.threshold).severity)

    def to_dict(self) -> dict[str, Any]:
        def level_dict(level: Optional[AlertLevelParams]) -> Optional[dict[str, Any]]:
            if level is None:
                return None
            return {"threshold": level.threshold, "severity": level.severity}

        return {
            "account_id": self.account_id,
            "daily_used_percent": self.daily_used_percent,
            "total_used_percent": self.total_used_percent,
            "daily_level": level_dict(self.daily_level),
            "total_level": level_dict(self.total_level),
            "notifications": [n.to_dict() for n in self.notifications],
            "active_alerts": [a.to_dict() for a in self.active_alerts],
            "degraded": self.degraded,
        }
