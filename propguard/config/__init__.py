"""
Configuration module.

Frozen policy defaults, firm presets and the 3-tier loader that merges them
with per-account overrides.
"""

from .defaults import RiskConfig, get_default_config
from .loader import ConfigLoader
from .validation import ConfigValidator, ValidationError

__all__ = [
    "RiskConfig",
    "get_default_config",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationError",
]
