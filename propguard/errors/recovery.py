"""
Errors that allow continued operation with reduced functionality.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Mixin for errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class NotificationStoreUnavailableError(GracefulDegradationError):
    """The notification flag store cannot be read or updated."""

    def __init__(self, message: str, store: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            degraded_functionality="breach_notifications",
            fallback_strategy="report_levels_without_delivery",
            **kwargs
        )
        self.store = store
