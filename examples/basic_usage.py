#!/usr/bin/env python3
"""
Basic Usage Example - PropGuard Risk & Compliance Engine

This script walks a single prop-firm account through the engine. It shows how to:
- Parse an account row as the data store returns it
- Refresh drawdown metrics and run the breach alert ladder
- Check a trade before submission
- Simulate a loss cascade and plan a recovery
- Score the trader's emotional state
- Project challenge progress and funded payouts

Run: python examples/basic_usage.py
"""

from datetime import datetime, timedelta, timezone

from propguard.config.notification_delivery import NotificationDeliveryConfig, create_stdout_destination
from propguard.data.parsers import parse_account_row, parse_check_in_row, parse_trade_proposal, parse_trade_rows
from propguard.engine import RiskComplianceEngine
from propguard.errors import TradeBlockedError
from propguard.metrics.account import ZONE_LABELS


def create_account_row() -> dict:
    """An FTMO 100k challenge account that lost 3.2k today."""
    return {
        "id": "demo-001",
        "account_name": "FTMO 100k",
        "prop_firm": "ftmo",
        "account_size": 100000,
        "current_balance": "96800.00",
        "day_start_balance": 100000,
        "max_daily_drawdown": 5,
        "max_total_drawdown": 10,
        "profit_target": 10,
    }


def create_trade_rows(now: datetime) -> list:
    results = [("loss", -420.0), ("loss", -380.0), ("win", 260.0), ("loss", -510.0), ("win", 330.0)]
    return [
        {"profit_loss": pnl, "result": result, "created_at": (now - timedelta(hours=2 * i)).isoformat()}
        for i, (result, pnl) in enumerate(results)
    ]


def main():
    """Main demonstration function."""
    print("🚀 PropGuard Risk & Compliance Engine - Basic Usage Demo")
    print("=" * 60)

    now = datetime.now(timezone.utc)

    print("1. Initializing the engine with stdout notifications...")
    delivery = NotificationDeliveryConfig(
        destinations=[create_stdout_destination("console", format="pretty")],
        async_dispatch=False,
    )
    engine = RiskComplianceEngine(delivery_config=delivery)
    account = parse_account_row(create_account_row())
    print(f"   Account: {account.display_name} ({account.firm})")
    print()

    print("2. Refreshing account metrics...")
    refresh = engine.refresh_account(account)
    metrics = refresh.metrics
    print(f"   Daily used: {metrics.daily_used_percent:.1f}% (${metrics.daily_remaining:,.0f} remaining)")
    print(f"   Total used: {metrics.total_used_percent:.1f}% (${metrics.total_remaining:,.0f} remaining)")
    print(f"   Zone: {ZONE_LABELS[metrics.drawdown_zone]}, suggested risk {metrics.suggested_risk_pct}%")
    print(f"   Notifications fired: {[n.tag for n in refresh.alerts.notifications]}")
    print()

    print("3. Checking a proposed trade...")
    trade = parse_trade_proposal({"pair": "EURUSD", "direction": "buy", "lot_size": 2, "stop_loss_pips": 25})
    assessment = engine.check_trade(trade, account)
    print(f"   Potential loss: ${assessment.potential_loss:,.0f} ({assessment.percent_of_daily:.0f}% of daily)")
    print(f"   Risk level: {assessment.risk_level.value}")
    for check in assessment.checks:
        print(f"   {'✅' if check.passed else '❌'} {check.label}")
    try:
        engine.clear_for_submission(assessment)
        print("   Trade cleared for submission")
    except TradeBlockedError as e:
        print(f"   Trade blocked: {e}")
    print()

    print("4. Simulating a loss cascade at 1% risk...")
    cascade = engine.simulate_cascade(account, risk_per_trade_pct=1.0)
    for step in cascade.steps[:5]:
        print(f"   {step.losses} losses -> ${step.balance:,.0f} [{step.status.value}]")
    print(f"   Affordable losses: {cascade.affordable_losses}")
    print()

    print("5. Planning the recovery...")
    plan = engine.plan_recovery(account, current_risk_pct=1.0)
    for strategy in plan.strategies:
        print(f"   {strategy.name}: {strategy.trades_needed} wins over {strategy.days_to_recover} days "
              f"at {strategy.risk_per_trade_pct}% risk")
    print(f"   Safe risk while recovering: {plan.safe_risk_pct}%")
    print()

    print("6. Scoring emotional risk...")
    check_in = parse_check_in_row({
        "mood": "frustrated", "confidence": 4, "stress": 7, "focus_level": 6, "sleep_hours": 6,
    })
    trades = parse_trade_rows(create_trade_rows(now))
    score = engine.emotional_risk(check_in, trades, current_risk_pct=1.0, account=account)
    print(f"   Score: {score.score:.0f}/100, multiplier x{score.suggested_risk_multiplier}")
    print(f"   {score.recommendation}")
    print()

    print("7. Challenge progress and payouts...")
    progress = engine.phase_progress(account, start_date=now - timedelta(days=12), now=now)
    print(f"   {progress.status_message}: day {progress.days_elapsed}/{progress.total_days}, "
          f"profit progress {progress.profit_progress:.0f}%")
    payouts = engine.payout_projection(account)
    for scenario in payouts.scenarios:
        print(f"   {scenario.monthly_percent:g}%/month -> ${scenario.trader_cut:,.0f} "
              f"(${scenario.yearly_estimate:,.0f}/year)")
    print()

    journal = engine.journal_stats(account, trades, now=now)
    print(f"8. Journal: {journal.week_trades} trades this week, {journal.compliance_rate:.0f}% compliant")

    engine.shutdown()
    print("\n✅ Demo complete")


if __name__ == "__main__":
    main()
