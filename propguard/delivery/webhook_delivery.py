"""HTTP webhook notification delivery."""

import json
import socket
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..config.notification_delivery import WebhookDeliveryConfig
from .base import (
    BaseNotificationDelivery,
    DeliveryResult,
    DeliveryStatus,
    Notification,
    NotificationDeliveryPermanentError,
    NotificationDeliveryRetryableError,
)


class WebhookNotificationDelivery(BaseNotificationDelivery):
    """Posts notifications as JSON to a push relay or chat webhook."""

    def __init__(self, name: str, config: WebhookDeliveryConfig):
        super().__init__(name, config)
        self.config: WebhookDeliveryConfig = config

        parsed = urlparse(config.url)
        if not parsed.scheme or not parsed.netloc:
            raise NotificationDeliveryPermanentError(f"Invalid URL: {config.url}")

    def deliver(self, notifications: list[Notification]) -> list[DeliveryResult]:
        """
        Deliver notifications via HTTP.

        Retryable and permanent errors propagate so that
        ``deliver_with_retry`` can classify them.
        """
        return [self._deliver_single(notification) for notification in notifications]

    def _deliver_single(self, notification: Notification) -> DeliveryResult:
        data = json.dumps(notification.to_dict()).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(data)),
            "User-Agent": "propguard/0.1",
        }
        if self.config.headers:
            headers.update(self.config.headers)

        req = Request(self.config.url, data=data, headers=headers, method=self.config.method)

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                response_code = response.getcode()
                response_data = response.read().decode("utf-8")

        except HTTPError as e:
            self.logger.warning(
                "Notification webhook HTTP error",
                delivery_name=self.name,
                tag=notification.tag,
                error_code=e.code,
                error_reason=str(e.reason)
            )
            if e.code >= 500:
                raise NotificationDeliveryRetryableError(f"HTTP {e.code}: {e.reason}") from e
            raise NotificationDeliveryPermanentError(f"HTTP {e.code}: {e.reason}") from e

        except (URLError, socket.timeout, OSError) as e:
            self.logger.warning(
                "Notification webhook network error",
                delivery_name=self.name,
                tag=notification.tag,
                error=str(e)
            )
            raise NotificationDeliveryRetryableError(f"Network error: {e}") from e

        if not 200 <= response_code < 300:
            message = f"HTTP {response_code}: {response_data[:200]}"
            if response_code >= 500:
                raise NotificationDeliveryRetryableError(message)
            raise NotificationDeliveryPermanentError(message)

        self.logger.info(
            "Notification delivered",
            delivery_name=self.name,
            tag=notification.tag,
            response_code=response_code
        )
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"HTTP {response_code}: {response_data[:100]}"
        )

    def health_check(self) -> bool:
        """Check if the webhook host answers a HEAD request."""
        parsed = urlparse(self.config.url)
        req = Request(f"{parsed.scheme}://{parsed.netloc}", method="HEAD")
        try:
            with urlopen(req, timeout=5) as response:
                return 200 <= response.getcode() < 400
        except (URLError, socket.timeout, OSError) as e:
            self.logger.warning(
                "Health check failed",
                delivery_name=self.name,
                error=str(e)
            )
            return False
