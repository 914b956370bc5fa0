"""
Input validation error classifications.

These exceptions are raised when a caller hands a component values that
cannot produce a finite result, e.g. a zero account size or a negative
drawdown limit.
"""

from typing import Any, Optional, Dict


class InvalidInputError(ValueError):
    """Base class for malformed component input."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.context = context or {}
        self.recoverable = False


class NonPositiveValueError(InvalidInputError):
    """A value that must be strictly positive was zero or negative."""


class OutOfRangeError(InvalidInputError):
    """A value fell outside its documented bounds."""

    def __init__(self, message: str, minimum: Optional[float] = None,
                 maximum: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.minimum = minimum
        self.maximum = maximum


class MalformedInputError(InvalidInputError):
    """Raw data exists but is in an unusable format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format
