"""Breach notification delivery: stdout, file and webhook destinations."""

from .base import (
    BaseNotificationDelivery,
    DeliveryResult,
    DeliveryStatus,
    Notification,
    NotificationDeliveryPermanentError,
    NotificationDeliveryRetryableError,
)
from .dispatcher import NotificationDispatcher
from .file_delivery import FileNotificationDelivery
from .stdout_delivery import StdoutNotificationDelivery
from .webhook_delivery import WebhookNotificationDelivery

__all__ = [
    "BaseNotificationDelivery",
    "DeliveryResult",
    "DeliveryStatus",
    "Notification",
    "NotificationDeliveryPermanentError",
    "NotificationDeliveryRetryableError",
    "NotificationDispatcher",
    "FileNotificationDelivery",
    "StdoutNotificationDelivery",
    "WebhookNotificationDelivery",
]
