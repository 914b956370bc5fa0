"""
Emotional risk adjuster.

Folds today's check-in and the recent trade streak into a 0-100 score and a
position size multiplier. Every factor is a declarative rule with a slot
weight; rules are evaluated independently and their weights summed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

from ..config.defaults import EmotionalBandParams, EmotionalParams
from ..data.validators import require_non_negative, validate_check_in
from ..logging import get_logger
from ..models.journal import NEGATIVE_MOODS, POSITIVE_MOODS, CheckIn, Mood, TradeRecord
from ..utils.time import ensure_utc

logger = get_logger(__name__)


class FactorImpact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class EmotionalFactor:
    """A factor that contributed to the score."""
    name: str
    impact: FactorImpact
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "impact": self.impact.value, "weight": self.weight}


@dataclass(frozen=True)
class RuleOutcome:
    """Contribution of one rule: optional factor, positive and total weight."""
    factor: Optional[EmotionalFactor]
    positive_weight: float = 0.0
    total_weight: float = 0.0


@dataclass(frozen=True)
class FactorRule:
    """
    A check-in rule. Its slot weight always counts toward the total.

    ``evaluate`` returns the factor (or None) and the positive weight earned.
    The slot weight is read from ``EmotionalParams.<name>_weight`` unless
    given explicitly.
    """
    name: str
    evaluate: Callable[[CheckIn, EmotionalParams], tuple]
    slot_weight: Optional[float] = None

    def weight(self, params: EmotionalParams) -> float:
        if self.slot_weight is not None:
            return self.slot_weight
        return getattr(params, f"{self.name}_weight")

    def apply(self, check_in: CheckIn, params: EmotionalParams) -> RuleOutcome:
        factor, positive = self.evaluate(check_in, params)
        return RuleOutcome(factor=factor, positive_weight=positive, total_weight=self.weight(params))


def _positive(name: str, params: EmotionalParams) -> tuple:
    weight = params.positive_factor_weight
    return EmotionalFactor(name, FactorImpact.POSITIVE, weight), weight


def _negative(name: str, weight: float) -> tuple:
    return EmotionalFactor(name, FactorImpact.NEGATIVE, weight), 0.0


def _mood_rule(check_in: CheckIn, params: EmotionalParams) -> tuple:
    mood = Mood.parse(check_in.mood)
    if mood in POSITIVE_MOODS:
        return _positive("Positive mood", params)
    if mood in NEGATIVE_MOODS:
        return _negative(f"{mood.value} mood detected", params.mood_weight)
    neutral = EmotionalFactor("Neutral mood", FactorImpact.NEUTRAL, params.neutral_mood_weight)
    return neutral, params.neutral_mood_credit


def _confidence_rule(check_in: CheckIn, params: EmotionalParams) -> tuple:
    if check_in.confidence >= 7:
        return _positive("High confidence", params)
    if check_in.confidence <= 3:
        return _negative("Low confidence", params.confidence_weight)
    return None, 0.0


def _stress_rule(check_in: CheckIn, params: EmotionalParams) -> tuple:
    if check_in.stress <= 3:
        return _positive("Low stress", params)
    if check_in.stress >= 7:
        return _negative("High stress level", params.stress_weight)
    return None, 0.0


def _sleep_rule(check_in: CheckIn, params: EmotionalParams) -> tuple:
    if check_in.sleep_hours >= 7:
        return _positive("Well rested", params)
    if check_in.sleep_hours < 5:
        return _negative("Sleep deprived", params.sleep_weight)
    return None, 0.0


def _focus_rule(check_in: CheckIn, params: EmotionalParams) -> tuple:
    if check_in.focus_level >= 7:
        return _positive("High focus", params)
    if check_in.focus_level <= 3:
        return _negative("Poor focus", params.focus_weight)
    return None, 0.0


CHECK_IN_RULES = (
    FactorRule("mood", _mood_rule),
    FactorRule("confidence", _confidence_rule),
    FactorRule("stress", _stress_rule),
    FactorRule("sleep", _sleep_rule),
    FactorRule("focus", _focus_rule),
)


def evaluate_trade_streak(trades: Sequence[TradeRecord], params: EmotionalParams) -> RuleOutcome:
    """
    Streak rule over trades ordered most recent first.

    Only applies with enough trades. Its weight counts toward the total only
    when a streak factor fires.
    """
    if len(trades) < params.min_trades_for_streak:
        return RuleOutcome(factor=None)

    recent_losses = sum(1 for t in trades[:params.loss_window] if t.is_loss)
    if recent_losses >= params.loss_streak_count:
        return RuleOutcome(
            factor=EmotionalFactor(
                f"{recent_losses} recent losses", FactorImpact.NEGATIVE, params.loss_streak_weight
            ),
            total_weight=params.loss_streak_weight,
        )

    if recent_losses == 0 and all(t.is_win for t in trades[:params.win_streak_window]):
        return RuleOutcome(
            factor=EmotionalFactor("Winning streak", FactorImpact.POSITIVE, params.win_streak_weight),
            positive_weight=params.win_streak_weight,
            total_weight=params.win_streak_weight,
        )

    return RuleOutcome(factor=None)


@dataclass(frozen=True)
class EmotionalRiskScore:
    """Emotional state folded into a risk multiplier."""
    score: float                     # 0-100, higher means more risk tolerance
    suggested_risk_multiplier: float
    factors: tuple
    alert_level: str
    recommendation: str
    suggested_risk_pct: float

    has_score = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "suggested_risk_multiplier": self.suggested_risk_multiplier,
            "factors": [f.to_dict() for f in self.factors],
            "alert_level": self.alert_level,
            "recommendation": self.recommendation,
            "suggested_risk_pct": self.suggested_risk_pct,
        }


@dataclass(frozen=True)
class InsufficientEmotionalData:
    """Nothing to score: no check-in and no usable trade streak."""
    reason: str = "No check-in and no recent trades"

    has_score = False

    def to_dict(self) -> dict[str, Any]:
        return {"insufficient_data": True, "reason": self.reason}


def select_band(score: float, params: EmotionalParams) -> EmotionalBandParams:
    """First band (descending by ``min_score``) the score reaches."""
    for band in params.bands:
        if score >= band.min_score:
            return band
    return params.bands[-1]


def score_emotional_risk(
    check_in: Optional[CheckIn],
    trades: Sequence[TradeRecord],
    current_risk_pct: float,
    params: Optional[EmotionalParams] = None,
    rules: Sequence[FactorRule] = CHECK_IN_RULES
) -> Union[EmotionalRiskScore, InsufficientEmotionalData]:
    """
    Score the trader's emotional state.

    Args:
        check_in: Today's check-in, if any
        trades: Recent journal trades in any order
        current_risk_pct: Usual risk per trade in percent
        params: Emotional policy
        rules: Check-in factor rules

    Returns:
        EmotionalRiskScore, or InsufficientEmotionalData when there is no
        check-in and the trades show no streak to score

    Raises:
        OutOfRangeError: If a check-in scale is out of range
    """
    params = params or EmotionalParams()
    current_risk_pct = require_non_negative("current_risk_pct", current_risk_pct)

    recent = sorted(trades, key=lambda t: ensure_utc(t.created_at), reverse=True)[:params.history_limit]

    if check_in is None and not recent:
        logger.debug("Emotional score skipped, no data")
        return InsufficientEmotionalData()

    outcomes = []
    if check_in is not None:
        validate_check_in(check_in)
        outcomes.extend(rule.apply(check_in, params) for rule in rules)
    outcomes.append(evaluate_trade_streak(recent, params))

    total_weight = sum(o.total_weight for o in outcomes)
    if total_weight <= 0:
        logger.debug("Emotional score skipped, no streak signal", trade_count=len(recent))
        return InsufficientEmotionalData(reason="Not enough recent trades")

    positive_weight = sum(o.positive_weight for o in outcomes)
    score = positive_weight / total_weight * 100

    band = select_band(score, params)

    result = EmotionalRiskScore(
        score=score,
        suggested_risk_multiplier=band.multiplier,
        factors=tuple(o.factor for o in outcomes if o.factor is not None),
        alert_level=band.alert_level,
        recommendation=band.recommendation,
        suggested_risk_pct=current_risk_pct * band.multiplier,
    )

    logger.debug(
        "Emotional risk scored",
        score=round(score, 1),
        multiplier=band.multiplier,
        alert_level=band.alert_level,
        factor_count=len(result.factors)
    )
    return result
