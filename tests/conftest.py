"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from unittest.mock import Mock

import pytest

from propguard.models import CheckIn, Direction, Mood, ProposedTrade, TradeRecord, TradeResult, TradingAccount


NOW = datetime(2024, 3, 15, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant."""
    return NOW


@pytest.fixture
def sample_account() -> TradingAccount:
    """100k account with a 5% daily and 10% total limit, slightly down today."""
    return TradingAccount(
        account_size=100000.0,
        current_balance=99000.0,
        day_start_balance=100000.0,
        max_daily_drawdown_pct=5.0,
        max_total_drawdown_pct=10.0,
        profit_target_pct=10.0,
        account_id="acct-001",
        name="FTMO 100k",
        firm="ftmo",
    )


@pytest.fixture
def small_account() -> TradingAccount:
    """10k account with 5% daily and 10% total limits at its starting balance."""
    return TradingAccount(
        account_size=10000.0,
        current_balance=10000.0,
        day_start_balance=10000.0,
        max_daily_drawdown_pct=5.0,
        max_total_drawdown_pct=10.0,
        account_id="acct-small",
        name="Small",
    )


@pytest.fixture
def sample_trade() -> ProposedTrade:
    """0.5 lot EURUSD with a 20 pip stop: 100 at risk."""
    return ProposedTrade(
        pair="EURUSD",
        direction=Direction.BUY,
        lot_size=0.5,
        stop_loss_pips=20.0,
        pip_value=10.0,
    )


@pytest.fixture
def positive_check_in() -> CheckIn:
    return CheckIn(
        mood=Mood.FOCUSED,
        confidence=8,
        stress=2,
        focus_level=9,
        sleep_hours=8.0,
    )


@pytest.fixture
def winning_trades() -> list:
    """Three wins, most recent first."""
    return [
        TradeRecord(profit_loss=120.0, result=TradeResult.WIN, created_at=NOW - timedelta(hours=i + 1))
        for i in range(3)
    ]


@pytest.fixture
def mock_sink() -> Mock:
    """Notification sink recording notify() calls."""
    return Mock(spec=["notify"])


@pytest.fixture
def sample_account_row() -> Dict[str, Any]:
    """Account row as stored by the data store."""
    return {
        "id": "acct-001",
        "account_name": "FTMO 100k",
        "prop_firm": "ftmo",
        "account_size": 100000,
        "current_balance": "99000.50",
        "day_start_balance": 100000,
        "max_daily_drawdown": 5,
        "max_total_drawdown": 10,
        "profit_target": 10,
    }
