"""
Logging configuration and utilities for the PropGuard risk engine.
"""
from .config import account_context, configure_logging, get_logger

__all__ = ["account_context", "configure_logging", "get_logger"]
