"""Default policy parameters for the risk and compliance engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AlertLevelParams:
    """One rung of the breach alert ladder."""
    threshold: float
    severity: str
    message: str


@dataclass(frozen=True)
class AlertLadderParams:
    """Breach alert ladder, ascending severity."""
    levels: tuple = (
        AlertLevelParams(50.0, "warning", "50% of daily limit used"),
        AlertLevelParams(75.0, "danger", "75% of daily limit used - Reduce position sizes"),
        AlertLevelParams(90.0, "critical", "90% CRITICAL - Stop trading immediately!"),
    )
    require_interaction_severity: str = "critical"


@dataclass(frozen=True)
class DrawdownZoneParams:
    """Total-drawdown progress zones (percent of the total limit used)."""
    caution_at: float = 30.0
    danger_at: float = 60.0
    critical_at: float = 80.0


@dataclass(frozen=True)
class RecoveryRiskParams:
    """Suggested risk per trade by drawdown depth from initial capital."""
    deep_drawdown_pct: float = 5.0          # Above this, deep_risk_pct
    moderate_drawdown_pct: float = 2.0      # Above this, moderate_risk_pct
    deep_risk_pct: float = 0.25
    moderate_risk_pct: float = 0.5
    shallow_risk_pct: float = 0.75          # Any drawdown at all
    default_risk_pct: float = 1.0           # At or above initial capital


@dataclass(frozen=True)
class CascadeParams:
    """Loss-cascade simulation policy."""
    steps: int = 10
    danger_losses: int = 1                  # Losses from daily breach for "danger"
    warning_losses: int = 2                 # Losses from daily breach for "warning"


@dataclass(frozen=True)
class CheckpointParams:
    """Pre-trade checkpoint thresholds."""
    max_risk_per_trade_pct: float = 2.0
    daily_budget_high_pct: float = 50.0     # Share of daily remaining for "high"
    daily_budget_medium_pct: float = 25.0   # Share of daily remaining for "medium"
    default_pip_value: float = 10.0


@dataclass(frozen=True)
class RecoveryProfileParams:
    """A single recovery strategy profile."""
    name: str
    risk_per_trade_pct: float
    trades_per_day: int
    reward_to_risk: float
    win_rate_needed: float


@dataclass(frozen=True)
class RecoveryParams:
    """Recovery planner policy."""
    profiles: tuple = (
        RecoveryProfileParams("conservative", 0.25, 2, 1.5, 55.0),
        RecoveryProfileParams("moderate", 0.5, 3, 2.0, 50.0),
        RecoveryProfileParams("aggressive", 0.75, 4, 2.5, 45.0),
    )
    milestone_profile: str = "conservative"
    max_milestones: int = 14
    safe_buffer_pct: float = 50.0
    caution_buffer_pct: float = 25.0
    max_recovery_risk_pct: float = 0.5


@dataclass(frozen=True)
class EmotionalBandParams:
    """Score band mapped to a risk multiplier."""
    min_score: float
    multiplier: float
    alert_level: str
    recommendation: str


@dataclass(frozen=True)
class EmotionalParams:
    """Emotional risk adjuster policy."""
    history_limit: int = 10
    min_trades_for_streak: int = 3
    loss_window: int = 5
    loss_streak_count: int = 3
    win_streak_window: int = 3

    # Check-in slot weights; a negative reading forfeits its whole slot
    mood_weight: float = 20.0
    confidence_weight: float = 15.0
    stress_weight: float = 20.0
    sleep_weight: float = 20.0
    focus_weight: float = 15.0
    positive_factor_weight: float = 15.0
    neutral_mood_weight: float = 10.0
    neutral_mood_credit: float = 5.0

    loss_streak_weight: float = 25.0
    win_streak_weight: float = 10.0

    bands: tuple = (
        EmotionalBandParams(
            70.0, 1.0, "green",
            "You're in a great mental state. Trade your normal size with confidence."),
        EmotionalBandParams(
            50.0, 0.75, "yellow",
            "Consider reducing position size by 25%. Some factors suggest caution."),
        EmotionalBandParams(
            30.0, 0.5, "yellow",
            "Reduce position size by 50%. Multiple stress factors detected."),
        EmotionalBandParams(
            0.0, 0.25, "red",
            "High-risk mental state. Trade at 25% size or consider sitting out."),
    )


@dataclass(frozen=True)
class PhaseParams:
    """Challenge phase tracking policy."""
    challenge_days: int = 30
    on_track_slack: float = 0.8             # Profit progress may trail time by 20%
    urgent_days_remaining: int = 7
    urgent_progress_pct: float = 80.0


@dataclass(frozen=True)
class PayoutParams:
    """Funded-account payout projection policy."""
    payout_split_pct: float = 80.0
    monthly_profit_scenarios: tuple = (2.0, 5.0, 10.0)
    scaling_multipliers: tuple = (1.0, 1.25, 1.5, 2.0, 4.0)
    scaling_monthly_return_pct: float = 5.0


@dataclass(frozen=True)
class JournalParams:
    """Trade journal compliance statistics."""
    lookback_days: int = 7
    max_trades: int = 20
    compliant_fraction_of_daily_limit: float = 0.1


@dataclass(frozen=True)
class RiskConfig:
    """Complete default configuration."""
    alerts: AlertLadderParams
    zones: DrawdownZoneParams
    recovery_risk: RecoveryRiskParams
    cascade: CascadeParams
    checkpoint: CheckpointParams
    recovery: RecoveryParams
    emotional: EmotionalParams
    phase: PhaseParams
    payout: PayoutParams
    journal: JournalParams


def get_default_config() -> RiskConfig:
    """Get the default configuration instance."""
    return RiskConfig(
        alerts=AlertLadderParams(),
        zones=DrawdownZoneParams(),
        recovery_risk=RecoveryRiskParams(),
        cascade=CascadeParams(),
        checkpoint=CheckpointParams(),
        recovery=RecoveryParams(),
        emotional=EmotionalParams(),
        phase=PhaseParams(),
        payout=PayoutParams(),
        journal=JournalParams(),
    )
