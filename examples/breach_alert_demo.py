#!/usr/bin/env python3
"""
Breach Alert Demo - PropGuard notification ladder

Replays a trading day on a 10k account whose balance swings through the
daily drawdown ladder. Notification flags live in SQLite, so running the demo
twice against the same database shows that already-fired rungs stay quiet.

Run: python examples/breach_alert_demo.py [flags.db]
"""

import os
import sys
import tempfile

from propguard.alerts import AlertSession
from propguard.config.notification_delivery import NotificationDeliveryConfig, create_stdout_destination
from propguard.engine import RiskComplianceEngine
from propguard.logging import configure_logging
from propguard.models import TradingAccount
from propguard.persistence import SQLiteFlagStore

# Balance after each refresh: 40%, 60%, 80%, back to 40%, then 95% of the daily limit
BALANCES = [9800.0, 9700.0, 9600.0, 9800.0, 9525.0]


def main():
    configure_logging(level="WARNING")

    db_path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(tempfile.mkdtemp(), "flags.db")
    print("🔔 PropGuard Breach Alert Demo")
    print("=" * 60)
    print(f"Flag store: {db_path}\n")

    delivery = NotificationDeliveryConfig(
        destinations=[create_stdout_destination("console", include_timestamp=False)],
        async_dispatch=False,
    )
    engine = RiskComplianceEngine(flag_store=SQLiteFlagStore(db_path), delivery_config=delivery)
    session = AlertSession()

    account = TradingAccount(
        account_size=10000.0,
        current_balance=10000.0,
        day_start_balance=10000.0,
        max_daily_drawdown_pct=5.0,
        max_total_drawdown_pct=10.0,
        account_id="demo-alerts",
        name="Demo 10k",
    )

    for balance in BALANCES:
        refresh = engine.refresh_account(account.with_balance(balance), session=session)
        level = refresh.alerts.daily_level
        print(f"   balance ${balance:,.0f} -> daily used {refresh.metrics.daily_used_percent:.0f}%"
              f" | level: {level.severity if level else 'none'}"
              f" | fired: {[n.tag for n in refresh.alerts.notifications]}")

        # Dismissing hides the banner for this session without touching the flags
        for alert in refresh.alerts.active_alerts:
            session.dismiss(alert.threshold)

    stats = engine.get_runtime_stats()
    print(f"\n📋 {stats['refreshes']} refreshes, {stats['notifications']} notifications")
    print(f"   Stored flags: {engine.flag_store.get_stats()}")
    engine.shutdown()


if __name__ == "__main__":
    main()
