"""
System failure error classifications.

These exceptions represent failures in the collaborators around the pure
calculations: the notification flag store, notification delivery, and the
trade submission gate.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for failures outside the calculation core."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class DeliveryError(SystemFailureError):
    """Notification delivery failures."""

    def __init__(self, message: str, delivery_method: Optional[str] = None,
                 tag: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.delivery_method = delivery_method
        self.tag = tag


class TradeBlockedError(SystemFailureError):
    """A trade submission was attempted while the pre-trade gate was closed."""

    def __init__(self, message: str, risk_level: Optional[str] = None,
                 failed_checks: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.risk_level = risk_level
        self.failed_checks = failed_checks or []
