"""
Data-store row parsers.

The surrounding application reads accounts, trades and check-ins from a
hosted database as flat snake_case rows. This module converts those rows into
model objects with proper type conversion, raising ``MalformedInputError`` for
rows that cannot be interpreted.
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional

from ..errors import MalformedInputError
from ..models.account import Direction, ProposedTrade, TradingAccount
from ..models.journal import CheckIn, Mood, TradeRecord, TradeResult
from ..utils.time import ensure_utc


def _get_number(row: dict[str, Any], key: str, default: Optional[float] = None,
                required: bool = True) -> Optional[float]:
    value = row.get(key, default)
    if value is None:
        if required:
            raise MalformedInputError(
                f"Missing required field '{key}'",
                field=key,
                raw_data=str(row)[:200],
                expected_format="number"
            )
        return None

    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(
            f"Field '{key}' is not numeric: {value!r}",
            field=key,
            value=value,
            raw_data=str(row)[:200],
            expected_format="number"
        ) from e


def _get_datetime(row: dict[str, Any], key: str) -> datetime:
    value = row.get(key)
    if value is None:
        raise MalformedInputError(
            f"Missing required field '{key}'",
            field=key,
            raw_data=str(row)[:200],
            expected_format="ISO 8601 timestamp"
        )

    try:
        return ensure_utc(value)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(
            f"Field '{key}' is not a timestamp: {value!r}",
            field=key,
            value=value,
            expected_format="ISO 8601 timestamp"
        ) from e


def parse_account_row(row: dict[str, Any]) -> TradingAccount:
    """
    Parse an account row.

    ``day_start_balance`` defaults to the current balance when the store has
    not recorded it yet (first refresh of the day).
    """
    current_balance = _get_number(row, "current_balance")
    return TradingAccount(
        account_size=_get_number(row, "account_size"),
        current_balance=current_balance,
        day_start_balance=_get_number(row, "day_start_balance", default=current_balance),
        max_daily_drawdown_pct=_get_number(row, "max_daily_drawdown"),
        max_total_drawdown_pct=_get_number(row, "max_total_drawdown"),
        profit_target_pct=_get_number(row, "profit_target", default=10.0),
        account_id=row.get("id"),
        name=row.get("account_name") or row.get("name"),
        firm=row.get("prop_firm") or row.get("firm"),
    )


def parse_trade_proposal(row: dict[str, Any], default_pip_value: float = 10.0) -> ProposedTrade:
    """Parse a proposed-trade payload (pair, direction, lot_size, stop_loss_pips)."""
    direction = str(row.get("direction", "")).strip().lower()
    if direction in ("long",):
        direction = "buy"
    elif direction in ("short",):
        direction = "sell"

    try:
        parsed_direction = Direction(direction)
    except ValueError as e:
        raise MalformedInputError(
            f"Unknown trade direction: {row.get('direction')!r}",
            field="direction",
            value=row.get("direction"),
            expected_format="buy|sell"
        ) from e

    return ProposedTrade(
        pair=str(row.get("pair", "")),
        direction=parsed_direction,
        lot_size=_get_number(row, "lot_size"),
        stop_loss_pips=_get_number(row, "stop_loss_pips"),
        pip_value=_get_number(row, "pip_value", default=default_pip_value),
    )


def parse_check_in_row(row: dict[str, Any]) -> CheckIn:
    """Parse a ``daily_checkins`` row."""
    check_in_date = row.get("check_in_date")
    if isinstance(check_in_date, str):
        try:
            check_in_date = date.fromisoformat(check_in_date[:10])
        except ValueError as e:
            raise MalformedInputError(
                f"Field 'check_in_date' is not a date: {check_in_date!r}",
                field="check_in_date",
                value=check_in_date,
                expected_format="YYYY-MM-DD"
            ) from e

    return CheckIn(
        mood=Mood.parse(row.get("mood")),
        confidence=int(_get_number(row, "confidence")),
        stress=int(_get_number(row, "stress")),
        focus_level=int(_get_number(row, "focus_level")),
        sleep_hours=_get_number(row, "sleep_hours"),
        date=check_in_date,
    )


def parse_trade_row(row: dict[str, Any]) -> TradeRecord:
    """Parse a ``trades`` row. Unknown result strings are treated as open."""
    raw_result = row.get("result")
    result = None
    if raw_result:
        try:
            result = TradeResult(str(raw_result).strip().lower())
        except ValueError:
            result = TradeResult.OPEN

    return TradeRecord(
        profit_loss=_get_number(row, "profit_loss", required=False),
        result=result,
        created_at=_get_datetime(row, "created_at"),
    )


def parse_trade_rows(rows: Iterable[dict[str, Any]]) -> list[TradeRecord]:
    """Parse trade rows and order them most recent first."""
    trades = [parse_trade_row(row) for row in rows]
    trades.sort(key=lambda trade: trade.created_at, reverse=True)
    return trades
