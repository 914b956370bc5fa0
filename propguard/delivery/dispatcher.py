"""Fan-out of breach notifications to configured delivery destinations."""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional

from ..config.notification_delivery import (
    DeliveryMethod,
    NotificationDeliveryConfig,
    get_default_delivery_config,
)
from ..logging import get_logger
from .base import BaseNotificationDelivery, DeliveryStatus, Notification
from .file_delivery import FileNotificationDelivery
from .stdout_delivery import StdoutNotificationDelivery
from .webhook_delivery import WebhookNotificationDelivery

logger = get_logger(__name__)


class NotificationDispatcher:
    """
    Notification sink with the ``notify(title, body, tag, require_interaction)``
    contract.

    With ``async_dispatch`` enabled deliveries run on a small thread pool and
    ``notify`` returns immediately. Delivery failures are logged and never
    propagate to the caller.
    """

    def __init__(self, delivery_config: Optional[NotificationDeliveryConfig] = None):
        self.logger = logger
        self.delivery_config = delivery_config or get_default_delivery_config()
        self.delivery_handlers: dict[str, BaseNotificationDelivery] = {}
        self._executor: Optional[ThreadPoolExecutor] = None

        if self.delivery_config.async_dispatch:
            self._executor = ThreadPoolExecutor(
                max_workers=self.delivery_config.max_workers,
                thread_name_prefix="propguard-notify"
            )

        self._init_delivery_handlers()

    def _init_delivery_handlers(self) -> None:
        """Initialize delivery handlers based on configuration."""
        if not self.delivery_config.enabled:
            return

        for destination in self.delivery_config.destinations:
            if not destination.enabled:
                continue

            try:
                if destination.method == DeliveryMethod.WEBHOOK:
                    handler = WebhookNotificationDelivery(destination.name, destination.config)
                elif destination.method == DeliveryMethod.FILE_OUTPUT:
                    handler = FileNotificationDelivery(destination.name, destination.config)
                elif destination.method == DeliveryMethod.STDOUT:
                    handler = StdoutNotificationDelivery(destination.name, destination.config)
                else:
                    self.logger.warning("Unsupported delivery method", method=str(destination.method))
                    continue

                self.delivery_handlers[destination.name] = handler
                self.logger.info("Initialized delivery handler", destination=destination.name)

            except Exception as e:
                self.logger.error(
                    "Failed to initialize delivery handler",
                    destination=destination.name,
                    error=str(e)
                )

    def notify(
        self,
        title: str,
        body: str,
        tag: str,
        require_interaction: bool,
        severity: Optional[str] = None,
        account_id: Optional[str] = None
    ) -> Optional[Future]:
        """
        Hand a notification to every matching destination.

        Returns:
            The background future when dispatching asynchronously, else None
        """
        notification = Notification(
            title=title,
            body=body,
            tag=tag,
            require_interaction=require_interaction,
            severity=severity,
            account_id=account_id,
        )

        if not self.delivery_config.enabled or not self.delivery_handlers:
            return None

        if self._executor is not None:
            try:
                return self._executor.submit(self._deliver, notification)
            except RuntimeError as e:
                # Executor already shut down
                self.logger.warning("Notification dropped", tag=tag, error=str(e))
                return None

        self._deliver(notification)
        return None

    def _deliver(self, notification: Notification) -> dict[str, bool]:
        """Deliver to all matching destinations; returns success per destination."""
        outcomes = {}

        for destination_name in self._filter_destinations(notification):
            handler = self.delivery_handlers.get(destination_name)
            if not handler:
                continue

            try:
                results = handler.deliver_with_retry(
                    [notification],
                    max_retries=self.delivery_config.retry_attempts,
                    retry_delay=self.delivery_config.retry_delay_seconds,
                    backoff=self.delivery_config.retry_backoff
                )
                delivered = bool(results) and results[0].status == DeliveryStatus.SUCCESS
            except Exception as e:
                self.logger.error(
                    "Notification delivery raised",
                    destination=destination_name,
                    tag=notification.tag,
                    error=str(e)
                )
                delivered = False

            if not delivered:
                self.logger.warning(
                    "Notification delivery failed",
                    destination=destination_name,
                    tag=notification.tag
                )
            outcomes[destination_name] = delivered

        return outcomes

    def _filter_destinations(self, notification: Notification) -> list[str]:
        """Destinations whose severity filter admits the notification."""
        names = []
        for destination in self.delivery_config.destinations:
            if not destination.enabled:
                continue
            if destination.severities_filter and notification.severity not in destination.severities_filter:
                continue
            names.append(destination.name)
        return names

    def health_check(self) -> dict[str, bool]:
        return {name: handler.health_check() for name, handler in self.delivery_handlers.items()}

    def get_stats(self) -> dict[str, Any]:
        return {name: handler.get_stats() for name, handler in self.delivery_handlers.items()}

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background executor, optionally draining pending deliveries."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
