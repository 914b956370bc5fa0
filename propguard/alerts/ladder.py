"""
Breach alert ladder.

Each ``(account, metric, threshold)`` has a persisted flag that is either
armed or fired. Crossing a threshold fires the flag; falling back below
re-arms it. Both transitions are compare-and-set on the flag store, so any
number of concurrent refreshes produce at most one notification per
contiguous stretch above a threshold.
"""

from typing import Any, Optional, Protocol

from ..config.defaults import AlertLadderParams, AlertLevelParams
from ..logging.config import get_alert_logger, log_flag_transition
from ..metrics.account import AccountMetrics
from ..persistence.flag_store import NotificationFlagStore
from .models import (
    ActiveAlert,
    AlertSession,
    BreachNotification,
    FlagState,
    LadderEvaluation,
    MetricType,
    Severity,
    format_threshold,
)

logger = get_alert_logger(__name__)


class NotificationSink(Protocol):
    def notify(self, title: str, body: str, tag: str, require_interaction: bool,
               **context: Any) -> Any:
        ...


def highest_level(used_percent: float, params: AlertLadderParams) -> Optional[AlertLevelParams]:
    """Highest ladder level at or below ``used_percent``."""
    reached = None
    for level in params.levels:
        if used_percent >= level.threshold:
            reached = level
    return reached


def build_notification(
    account_id: str,
    account_name: str,
    metric_type: MetricType,
    level: AlertLevelParams,
    used_percent: float,
    remaining: float,
    params: AlertLadderParams
) -> BreachNotification:
    """Format the notification for a won threshold crossing."""
    severity = Severity(level.severity)
    return BreachNotification(
        account_id=account_id,
        metric_type=metric_type,
        threshold=level.threshold,
        severity=severity,
        used_percent=used_percent,
        remaining=remaining,
        title=f"{account_name} - {severity.value.upper()}",
        body=f"{metric_type.label} drawdown at {used_percent:.1f}%. ${remaining:.0f} remaining.",
        tag=f"{metric_type.label}_{format_threshold(level.threshold)}",
        require_interaction=level.severity == params.require_interaction_severity,
    )


class BreachAlertLadder:
    """Threshold ladder over daily and total drawdown usage."""

    def __init__(
        self,
        store: NotificationFlagStore,
        sink: Optional[NotificationSink] = None,
        params: Optional[AlertLadderParams] = None
    ):
        self.store = store
        self.sink = sink
        self.params = params or AlertLadderParams()
        self.logger = logger

    def evaluate(
        self,
        account_id: str,
        metrics: AccountMetrics,
        account_name: Optional[str] = None,
        session: Optional[AlertSession] = None
    ) -> LadderEvaluation:
        """
        Refresh the ladder for one account.

        Args:
            account_id: Key for the persisted flags
            metrics: Current account metrics
            account_name: Name used in notification titles
            session: Session whose dismissals filter the active alerts

        Returns:
            LadderEvaluation with levels, won notifications and active alerts.
            ``degraded`` is set when the flag store failed; notifications won
            before the failure are still reported.
        """
        account_id = str(account_id)
        account_name = account_name or account_id

        notifications: list[BreachNotification] = []
        degraded = False

        try:
            for metric_type, used, remaining in (
                (MetricType.DAILY, metrics.daily_used_percent, metrics.daily_remaining),
                (MetricType.TOTAL, metrics.total_used_percent, metrics.total_remaining),
            ):
                notifications.extend(self.evaluate_metric(
                    account_id, metric_type, used, remaining, account_name
                ))
        except Exception as e:
            degraded = True
            self.logger.warning(
                "Notification flag store failed, reporting levels only",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                fallback_strategy=getattr(e, "fallback_strategy", None)
            )

        return LadderEvaluation(
            account_id=account_id,
            daily_used_percent=metrics.daily_used_percent,
            total_used_percent=metrics.total_used_percent,
            daily_level=highest_level(metrics.daily_used_percent, self.params),
            total_level=highest_level(metrics.total_used_percent, self.params),
            notifications=tuple(notifications),
            active_alerts=self.active_alerts(
                metrics.daily_used_percent, metrics.total_used_percent, session
            ),
            degraded=degraded,
        )

    def evaluate_metric(
        self,
        account_id: str,
        metric_type: MetricType,
        used_percent: float,
        remaining: float,
        account_name: Optional[str] = None
    ) -> list[BreachNotification]:
        """
        Walk every ladder level for one metric.

        Raises:
            NotificationStoreUnavailableError: If the flag store fails
            PersistenceError: If the flag store rejects a write
        """
        account_name = account_name or account_id
        won = []

        for level in self.params.levels:
            if used_percent >= level.threshold:
                if not self._transition(account_id, metric_type, level.threshold, True, used_percent):
                    continue

                notification = build_notification(
                    account_id, account_name, metric_type, level,
                    used_percent, remaining, self.params
                )
                self._deliver(notification)
                won.append(notification)

            else:
                self._transition(account_id, metric_type, level.threshold, False, used_percent)

        return won

    def _transition(
        self,
        account_id: str,
        metric_type: MetricType,
        threshold: float,
        notified: bool,
        used_percent: float
    ) -> bool:
        """Flip a flag to ``notified``; True only for the caller that flipped it."""
        if not self.store.compare_and_set(account_id, metric_type.value, threshold, not notified, notified):
            return False

        log_flag_transition(
            self.logger, account_id, metric_type.value, threshold,
            FlagState.from_notified(not notified).value, FlagState.from_notified(notified).value,
            context={"used_percent": used_percent}
        )
        return True

    def active_alerts(
        self,
        daily_used_percent: float,
        total_used_percent: float,
        session: Optional[AlertSession] = None
    ) -> tuple:
        """Levels reached by either metric and not dismissed in ``session``."""
        alerts = []
        for level in self.params.levels:
            if session is not None and session.is_dismissed(level.threshold):
                continue

            metric_types = tuple(
                metric for metric, used in (
                    (MetricType.DAILY, daily_used_percent),
                    (MetricType.TOTAL, total_used_percent),
                )
                if used >= level.threshold
            )
            if metric_types:
                alerts.append(ActiveAlert(
                    threshold=level.threshold,
                    severity=Severity(level.severity),
                    message=level.message,
                    metric_types=metric_types,
                ))
        return tuple(alerts)

    def _deliver(self, notification: BreachNotification) -> None:
        if self.sink is None:
            return

        try:
            self.sink.notify(
                notification.title,
                notification.body,
                notification.tag,
                notification.require_interaction,
                severity=notification.severity.value,
                account_id=notification.account_id,
            )
        except Exception as e:
            self.logger.error(
                "Notification sink raised",
                account_id=notification.account_id,
                tag=notification.tag,
                error=str(e)
            )
