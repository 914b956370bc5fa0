"""Prop-firm phase presets."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class FirmPhase:
    """One stage of a firm's challenge, e.g. evaluation or funded."""
    name: str
    profit_target: float = 0.0
    min_days: int = 0
    max_days: int = 0
    payout_split: float = 0.0
    scaling_bonus: float = 0.0

    @property
    def is_funded(self) -> bool:
        return self.payout_split > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "profit_target": self.profit_target,
            "min_days": self.min_days,
            "max_days": self.max_days,
            "payout_split": self.payout_split,
            "scaling_bonus": self.scaling_bonus,
        }


@dataclass(frozen=True)
class FirmProfile:
    """Phase sequence for a prop firm."""
    firm_id: str
    name: str
    phases: tuple = field(default_factory=tuple)

    @property
    def funded_phase(self) -> Optional[FirmPhase]:
        """First phase that pays out, else the last phase."""
        for phase in self.phases:
            if phase.is_funded:
                return phase
        return self.phases[-1] if self.phases else None

    @property
    def evaluation_phases(self) -> tuple:
        return tuple(phase for phase in self.phases if not phase.is_funded)

    def to_dict(self) -> dict[str, Any]:
        return {
            "firm_id": self.firm_id,
            "name": self.name,
            "phases": [phase.to_dict() for phase in self.phases],
        }
