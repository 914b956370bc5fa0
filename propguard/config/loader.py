"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    AlertLadderParams,
    AlertLevelParams,
    CascadeParams,
    CheckpointParams,
    DrawdownZoneParams,
    EmotionalBandParams,
    EmotionalParams,
    JournalParams,
    PayoutParams,
    PhaseParams,
    RecoveryParams,
    RecoveryProfileParams,
    RecoveryRiskParams,
    RiskConfig,
    get_default_config,
)
from .firms import FirmPhase, FirmProfile

# Section name -> (params class, {tuple field -> item class})
_SECTIONS = {
    "alerts": (AlertLadderParams, {"levels": AlertLevelParams}),
    "zones": (DrawdownZoneParams, {}),
    "recovery_risk": (RecoveryRiskParams, {}),
    "cascade": (CascadeParams, {}),
    "checkpoint": (CheckpointParams, {}),
    "recovery": (RecoveryParams, {"profiles": RecoveryProfileParams}),
    "emotional": (EmotionalParams, {"bands": EmotionalBandParams}),
    "phase": (PhaseParams, {}),
    "payout": (PayoutParams, {}),
    "journal": (JournalParams, {}),
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: RiskConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def _load_firms_file(self) -> dict[str, Any]:
        firms_file = self.config_dir / "firms.yaml"

        if not firms_file.exists():
            return {}

        with open(firms_file) as f:
            firms_config = yaml.safe_load(f) or {}

        return firms_config.get("firms", {}) or {}

    def available_firms(self) -> list[str]:
        """List firm identifiers defined in firms.yaml."""
        return sorted(self._load_firms_file())

    def load_firm_config(self, firm_id: str) -> dict[str, Any]:
        """Load firm-specific configuration overrides."""
        firm = self._load_firms_file().get(firm_id, {}) or {}
        return firm.get("overrides", {}) or {}

    def load_firm_profile(self, firm_id: Optional[str]) -> FirmProfile:
        """
        Load the phase presets for a firm.

        Unknown or missing firms fall back to the ``custom`` preset; without a
        firms file a single funded phase with the default split is returned.
        """
        firms = self._load_firms_file()
        firm_key = firm_id if firm_id in firms else "custom"
        firm = firms.get(firm_key)

        if not firm:
            return FirmProfile(
                firm_id="custom",
                name="Custom",
                phases=(FirmPhase(
                    name="Funded",
                    payout_split=self.defaults.payout.payout_split_pct,
                ),),
            )

        phases = tuple(
            FirmPhase(
                name=phase["name"],
                profit_target=float(phase.get("profit_target", 0.0)),
                min_days=int(phase.get("min_days", 0)),
                max_days=int(phase.get("max_days", 0)),
                payout_split=float(phase.get("payout_split", 0.0)),
                scaling_bonus=float(phase.get("scaling_bonus", 0.0)),
            )
            for phase in firm.get("phases", [])
        )

        return FirmProfile(
            firm_id=firm_key,
            name=firm.get("name", firm_key),
            phases=phases,
        )

    def merge_config(
        self,
        firm_id: Optional[str] = None,
        account_overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-account overrides (highest priority)
        2. Firm-specific overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        if firm_id:
            config = self._deep_merge(config, self.load_firm_config(firm_id))

        if account_overrides:
            config = self._deep_merge(config, account_overrides)

        return config

    def load(
        self,
        firm_id: Optional[str] = None,
        account_overrides: Optional[dict[str, Any]] = None
    ) -> RiskConfig:
        """Merge configuration and build the typed RiskConfig."""
        return self.build_config(self.merge_config(firm_id, account_overrides))

    @staticmethod
    def build_config(config: dict[str, Any]) -> RiskConfig:
        """Build a typed RiskConfig from a merged configuration dictionary."""
        sections = {}
        for section_name, (params_cls, item_classes) in _SECTIONS.items():
            values = dict(config.get(section_name, {}))
            known = {f.name for f in fields(params_cls)}
            kwargs = {}
            for key, value in values.items():
                if key not in known:
                    continue
                if key in item_classes:
                    item_cls = item_classes[key]
                    value = tuple(
                        item if isinstance(item, item_cls) else item_cls(**item)
                        for item in value
                    )
                elif isinstance(value, list):
                    value = tuple(value)
                kwargs[key] = value
            sections[section_name] = params_cls(**kwargs)

        return RiskConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> Any:
        """Convert nested dataclasses (and tuples of them) to plain data."""
        if is_dataclass(obj):
            return {
                f.name: self._dataclass_to_dict(getattr(obj, f.name))
                for f in fields(obj)
            }
        if isinstance(obj, (tuple, list)):
            return [self._dataclass_to_dict(item) for item in obj]
        return obj

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries. Lists are replaced, not merged."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
