"""
Centralized logging configuration for the PropGuard risk engine.

All components log through structlog. Checkpoint decisions and notification
flag transitions go through dedicated audit loggers so that every gate
outcome and every armed/fired change can be reconstructed from the logs.
Per-request account context is carried in structlog context variables.
"""
import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import FilteringBoundLogger

LOG_LEVEL_ENV = "PROPGUARD_LOG_LEVEL"
LOG_FORMAT_ENV = "PROPGUARD_LOG_FORMAT"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {name}")
    return resolved


def configure_logging(
    level: Optional[str] = None,
    format_json: Optional[bool] = None,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the engine and any host application.

    Level and output format fall back to ``PROPGUARD_LOG_LEVEL`` and
    ``PROPGUARD_LOG_FORMAT`` (``json`` or ``console``) when not given.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render JSON lines instead of console output
        include_timestamp: Add an ISO timestamp to every record
        include_caller: Add filename and line number
        extra_processors: Processors inserted before the renderer

    Raises:
        ValueError: On an unknown level name
    """
    log_level = _resolve_level(level)
    if format_json is None:
        format_json = os.environ.get(LOG_FORMAT_ENV, "console").lower() == "json"

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    processors.extend(extra_processors or [])
    processors.append(
        structlog.processors.JSONRenderer() if format_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def account_context(account_id: Optional[str], **values: Any) -> Iterator[None]:
    """Attach ``account_id`` (and any extra values) to every record logged inside the block."""
    with structlog.contextvars.bound_contextvars(account_id=account_id, **values):
        yield


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger, ``name`` is usually the module's ``__name__``."""
    return structlog.get_logger(name)


def get_checkpoint_logger(name: str) -> FilteringBoundLogger:
    """Logger bound for pre-trade checkpoint audit records."""
    return get_logger(name).bind(
        subsystem="checkpoint",
        audit_trail=True
    )


def get_alert_logger(name: str) -> FilteringBoundLogger:
    """Logger bound for breach alert ladder audit records."""
    return get_logger(name).bind(
        subsystem="breach_alerts",
        audit_trail=True
    )


def log_check_decision(
    logger: FilteringBoundLogger,
    check_name: str,
    passed: bool,
    critical: bool,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a single pre-trade check outcome with standardized fields.

    Args:
        logger: Structlog logger instance
        check_name: Identifier of the check being evaluated
        passed: Whether the check passed
        critical: Whether a failure blocks the trade
        reason: Human readable explanation
        context: Additional context data
    """
    bound_logger = logger.bind(
        check_name=check_name,
        check_result="PASS" if passed else "FAIL",
        critical=critical,
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if passed:
        bound_logger.debug("Check passed")
    elif critical:
        bound_logger.warning("Critical check failed")
    else:
        bound_logger.info("Check failed")


def log_flag_transition(
    logger: FilteringBoundLogger,
    account_id: str,
    metric_type: str,
    threshold: float,
    from_state: str,
    to_state: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a notification flag state change.

    Args:
        logger: Structlog logger instance
        account_id: Account owning the flag
        metric_type: "daily" or "total"
        threshold: Ladder threshold in percent
        from_state: Previous flag state
        to_state: New flag state
        context: Additional context data
    """
    bound_logger = logger.bind(
        account_id=account_id,
        metric_type=metric_type,
        threshold=threshold,
        from_state=from_state,
        to_state=to_state,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Notification flag transition")
