"""Standard output notification delivery."""

import json
import sys
from datetime import datetime, timezone

from ..config.notification_delivery import StdoutDeliveryConfig
from .base import BaseNotificationDelivery, DeliveryResult, DeliveryStatus, Notification


class StdoutNotificationDelivery(BaseNotificationDelivery):
    """Prints notifications to stdout."""

    def __init__(self, name: str, config: StdoutDeliveryConfig):
        super().__init__(name, config)
        self.config: StdoutDeliveryConfig = config

    def deliver(self, notifications: list[Notification]) -> list[DeliveryResult]:
        results = []

        for notification in notifications:
            try:
                print(self._format_notification(notification), file=sys.stdout, flush=True)

                self.logger.debug(
                    "Notification printed to stdout",
                    delivery_name=self.name,
                    tag=notification.tag
                )
                results.append(DeliveryResult(
                    status=DeliveryStatus.SUCCESS,
                    message="Printed to stdout"
                ))

            except (OSError, ValueError) as e:
                self.logger.error(
                    "Failed to print notification to stdout",
                    delivery_name=self.name,
                    tag=notification.tag,
                    error=str(e)
                )
                results.append(DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Stdout error: {e}",
                    error=e
                ))

        return results

    def _format_notification(self, notification: Notification) -> str:
        timestamp = datetime.now(timezone.utc).isoformat()

        if self.config.format == "pretty":
            output = f"{notification.title}: {notification.body}"
            if self.config.include_timestamp:
                output = f"[{timestamp}] {output}"
            return output

        payload = notification.to_dict()
        if self.config.include_timestamp:
            payload["stdout_timestamp"] = timestamp
        return json.dumps(payload)

    def health_check(self) -> bool:
        try:
            return sys.stdout.writable()
        except (OSError, ValueError):
            return False
