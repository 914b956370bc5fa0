"""
Error classification for the risk and compliance engine.

Only malformed input is a hard error. Breached limits, missing optional data
and unavailable side channels are reported inside result values instead.
"""

from .input_errors import (
    InvalidInputError,
    NonPositiveValueError,
    OutOfRangeError,
    MalformedInputError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    DeliveryError,
    TradeBlockedError,
)
from .recovery import (
    GracefulDegradationError,
    NotificationStoreUnavailableError,
)

__all__ = [
    # Input Errors
    "InvalidInputError",
    "NonPositiveValueError",
    "OutOfRangeError",
    "MalformedInputError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "DeliveryError",
    "TradeBlockedError",
    # Degradation
    "GracefulDegradationError",
    "NotificationStoreUnavailableError",
]
