"""Pure risk calculations: cascade, checkpoint, recovery, emotional, phase, payout."""

from .cascade import CascadeProjection, CascadeStatus, CascadeStep, simulate_loss_cascade
from .checkpoint import PreTradeCheckpoint, RiskAssessment, RiskCheck, RiskLevel, assess_trade
from .emotional import (
    EmotionalFactor,
    EmotionalRiskScore,
    FactorRule,
    InsufficientEmotionalData,
    score_emotional_risk,
)
from .payout import PayoutProjection, PayoutScenario, ScalingTier, project_payouts
from .phase import PhaseProgress, PhaseStatus, project_phase_progress
from .recovery import Milestone, RecoveryPlan, RecoveryRiskStatus, RecoveryStrategy, plan_recovery

__all__ = [
    "CascadeProjection",
    "CascadeStatus",
    "CascadeStep",
    "simulate_loss_cascade",
    "PreTradeCheckpoint",
    "RiskAssessment",
    "RiskCheck",
    "RiskLevel",
    "assess_trade",
    "EmotionalFactor",
    "EmotionalRiskScore",
    "FactorRule",
    "InsufficientEmotionalData",
    "score_emotional_risk",
    "PayoutProjection",
    "PayoutScenario",
    "ScalingTier",
    "project_payouts",
    "PhaseProgress",
    "PhaseStatus",
    "project_phase_progress",
    "Milestone",
    "RecoveryPlan",
    "RecoveryRiskStatus",
    "RecoveryStrategy",
    "plan_recovery",
]
