"""
Input validation for the risk calculations.

Every component validates its inputs up front so that malformed values are
rejected with a descriptive error instead of leaking NaN or infinity into a
result.
"""

import math
from typing import Any, Optional

from ..errors import InvalidInputError, NonPositiveValueError, OutOfRangeError
from ..models.account import ProposedTrade, TradingAccount
from ..models.journal import CheckIn


def require_finite(name: str, value: Any) -> float:
    """Return ``value`` as float, rejecting non-numbers, NaN and infinity."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}", field=name, value=value)

    number = float(value)
    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be finite, got {value!r}", field=name, value=value)
    return number


def require_positive(name: str, value: Any) -> float:
    """Return ``value`` as float, rejecting zero and negatives."""
    number = require_finite(name, value)
    if number <= 0:
        raise NonPositiveValueError(f"{name} must be positive, got {value!r}", field=name, value=value)
    return number


def require_non_negative(name: str, value: Any) -> float:
    """Return ``value`` as float, rejecting negatives."""
    number = require_finite(name, value)
    if number < 0:
        raise OutOfRangeError(
            f"{name} must not be negative, got {value!r}",
            minimum=0.0, field=name, value=value
        )
    return number


def require_range(name: str, value: Any, minimum: float,
                  maximum: Optional[float] = None) -> float:
    """Return ``value`` as float, rejecting values outside [minimum, maximum]."""
    number = require_finite(name, value)
    if number < minimum or (maximum is not None and number > maximum):
        bound = f"[{minimum}, {maximum}]" if maximum is not None else f">= {minimum}"
        raise OutOfRangeError(
            f"{name} must be in {bound}, got {value!r}",
            minimum=minimum, maximum=maximum, field=name, value=value
        )
    return number


def validate_account(account: TradingAccount) -> None:
    """
    Validate an account snapshot.

    Raises:
        InvalidInputError: If any size, balance or limit is unusable
    """
    require_positive("account_size", account.account_size)
    require_finite("current_balance", account.current_balance)
    require_positive("day_start_balance", account.day_start_balance)
    require_range("max_daily_drawdown_pct", account.max_daily_drawdown_pct, 0.0, 100.0)
    require_positive("max_daily_drawdown_pct", account.max_daily_drawdown_pct)
    require_range("max_total_drawdown_pct", account.max_total_drawdown_pct, 0.0, 100.0)
    require_positive("max_total_drawdown_pct", account.max_total_drawdown_pct)
    require_positive("profit_target_pct", account.profit_target_pct)


def validate_trade(trade: ProposedTrade) -> None:
    """
    Validate a proposed trade.

    Raises:
        InvalidInputError: If lot size, stop or pip value is unusable
    """
    if not trade.pair:
        raise InvalidInputError("pair must not be empty", field="pair", value=trade.pair)
    require_positive("lot_size", trade.lot_size)
    require_positive("stop_loss_pips", trade.stop_loss_pips)
    require_positive("pip_value", trade.pip_value)


def validate_check_in(check_in: CheckIn) -> None:
    """
    Validate a check-in's scales.

    Raises:
        OutOfRangeError: If a 1-10 scale or the sleep hours are out of range
    """
    require_range("confidence", check_in.confidence, 1, 10)
    require_range("stress", check_in.stress, 1, 10)
    require_range("focus_level", check_in.focus_level, 1, 10)
    require_range("sleep_hours", check_in.sleep_hours, 0, 24)
