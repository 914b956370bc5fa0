"""Base classes for breach notification delivery mechanisms."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..errors import DeliveryError
from ..logging import get_logger


class DeliveryStatus(Enum):
    """Notification delivery status."""
    SUCCESS = "success"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


@dataclass
class DeliveryResult:
    """Result of a notification delivery attempt."""
    status: DeliveryStatus
    message: Optional[str] = None
    attempt_count: int = 1
    delivery_time_ms: Optional[int] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class Notification:
    """Payload handed to the notification sink."""
    title: str
    body: str
    tag: str
    require_interaction: bool
    severity: Optional[str] = None
    account_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "tag": self.tag,
            "require_interaction": self.require_interaction,
            "severity": self.severity,
            "account_id": self.account_id,
        }


class NotificationDeliveryRetryableError(Exception):
    """Delivery failure worth another attempt."""


class NotificationDeliveryPermanentError(Exception):
    """Delivery failure that should not be retried."""


class BaseNotificationDelivery(ABC):
    """Base class for notification delivery mechanisms."""

    def __init__(self, name: str, config: Any):
        self.name = name
        self.config = config
        self.logger = get_logger(f"propguard.delivery.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def deliver(self, notifications: list[Notification]) -> list[DeliveryResult]:
        """
        Deliver notifications to the configured destination.

        Args:
            notifications: Notifications to deliver

        Returns:
            List of delivery results for each notification
        """

    @abstractmethod
    def health_check(self) -> bool:
        """Check if delivery mechanism is healthy."""

    def deliver_with_retry(
        self,
        notifications: list[Notification],
        max_retries: int = 2,
        retry_delay: float = 1.0,
        backoff: float = 2.0
    ) -> list[DeliveryResult]:
        """
        Deliver notifications one by one, retrying transient failures.

        The wait before retry ``n`` is ``retry_delay * backoff ** (n - 1)``.
        Permanent errors are reported as FAILED without retrying; exhausted
        retries are reported as DEAD_LETTER.

        Args:
            notifications: Notifications to deliver
            max_retries: Retries after the first attempt
            retry_delay: Initial delay between attempts in seconds
            backoff: Delay multiplier per retry

        Returns:
            One result per notification, in order
        """
        return [
            self._deliver_one(notification, max_retries, retry_delay, backoff)
            for notification in notifications
        ]

    def _deliver_one(
        self,
        notification: Notification,
        max_retries: int,
        retry_delay: float,
        backoff: float
    ) -> DeliveryResult:
        last_error: Optional[Exception] = None
        attempts = max_retries + 1

        for attempt in range(1, attempts + 1):
            started = time.monotonic()
            try:
                outcome = self.deliver([notification])
            except NotificationDeliveryPermanentError as e:
                self._error_count += 1
                return DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Permanent error: {e}",
                    attempt_count=attempt,
                    error=e
                )
            except Exception as e:
                last_error = e
            else:
                if outcome and outcome[0].status == DeliveryStatus.SUCCESS:
                    result = outcome[0]
                    result.delivery_time_ms = int((time.monotonic() - started) * 1000)
                    result.attempt_count = attempt
                    self._delivery_count += 1
                    return result
                last_error = outcome[0].error if outcome else None

            if attempt < attempts:
                delay = retry_delay * backoff ** (attempt - 1)
                self.logger.warning(
                    "Delivery attempt failed, retrying",
                    delivery_name=self.name,
                    attempt=attempt,
                    retry_in=delay,
                    tag=notification.tag,
                    error=str(last_error)
                )
                time.sleep(delay)

        self._error_count += 1
        self.logger.error(
            "Notification moved to dead letter",
            delivery_name=self.name,
            attempts=attempts,
            tag=notification.tag,
            error=str(last_error)
        )
        dead_letter = DeliveryError(
            f"Max retries exceeded: {last_error}",
            delivery_method=self.name,
            tag=notification.tag,
            context={"attempts": attempts}
        )
        dead_letter.__cause__ = last_error
        return DeliveryResult(
            status=DeliveryStatus.DEAD_LETTER,
            message=str(dead_letter),
            attempt_count=attempts,
            error=dead_letter
        )

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        total = self._delivery_count + self._error_count
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": self._delivery_count / total if total > 0 else 0.0,
        }

    def reset_stats(self):
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0
