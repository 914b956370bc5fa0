"""Breach alert ladder with persisted, hysteretic notification flags."""

from .ladder import BreachAlertLadder, NotificationSink, build_notification, highest_level
from .models import (
    ActiveAlert,
    AlertSession,
    BreachNotification,
    FlagState,
    LadderEvaluation,
    MetricType,
    Severity,
)

__all__ = [
    "BreachAlertLadder",
    "NotificationSink",
    "build_notification",
    "highest_level",
    "ActiveAlert",
    "AlertSession",
    "BreachNotification",
    "FlagState",
    "LadderEvaluation",
    "MetricType",
    "Severity",
]
