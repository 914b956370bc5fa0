"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from propguard.config.defaults import get_default_config
from propguard.config.loader import ConfigLoader
from propguard.config.validation import ConfigValidator


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        config = get_default_config()

        assert [level.threshold for level in config.alerts.levels] == [50.0, 75.0, 90.0]
        assert config.cascade.steps == 10
        assert config.checkpoint.max_risk_per_trade_pct == 2.0
        assert config.recovery.max_milestones == 14
        assert config.payout.payout_split_pct == 80.0


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        loader = ConfigLoader.create()

        assert isinstance(loader.config_dir, Path)
        assert (loader.config_dir / "firms.yaml").exists()

    def test_merge_config_defaults_only(self) -> None:
        loader = ConfigLoader.create()
        config = loader.merge_config()

        assert config["cascade"]["steps"] == 10
        assert config["alerts"]["levels"][0]["threshold"] == 50.0

    def test_merge_config_with_overrides(self) -> None:
        """Account overrides replace single keys and keep the rest."""
        loader = ConfigLoader.create()
        config = loader.merge_config(None, {"checkpoint": {"max_risk_per_trade_pct": 1.0}})

        assert config["checkpoint"]["max_risk_per_trade_pct"] == 1.0
        assert config["checkpoint"]["daily_budget_high_pct"] == 50.0

    def test_firm_overrides(self) -> None:
        loader = ConfigLoader.create()
        config = loader.load("myForexFunds")

        assert config.payout.payout_split_pct == 75.0

    def test_account_overrides_beat_firm(self) -> None:
        loader = ConfigLoader.create()
        config = loader.load("myForexFunds", {"payout": {"payout_split_pct": 90.0}})

        assert config.payout.payout_split_pct == 90.0

    def test_unknown_firm_uses_defaults(self) -> None:
        loader = ConfigLoader.create()
        assert loader.load("no-such-firm") == get_default_config()

    def test_lists_are_replaced(self) -> None:
        loader = ConfigLoader.create()
        config = loader.load(None, {"alerts": {"levels": [
            {"threshold": 80.0, "severity": "critical", "message": "Stop"},
        ]}})

        assert len(config.alerts.levels) == 1
        assert config.alerts.levels[0].threshold == 80.0

    def test_unknown_keys_ignored(self) -> None:
        loader = ConfigLoader.create()
        config = loader.load(None, {"cascade": {"steps": 5, "colour": "red"}})

        assert config.cascade.steps == 5

    def test_round_trip_defaults(self) -> None:
        loader = ConfigLoader.create()
        assert ConfigLoader.build_config(loader.merge_config()) == get_default_config()


class TestFirmProfiles:
    """Test firm phase presets."""

    def test_available_firms(self) -> None:
        firms = ConfigLoader.create().available_firms()
        assert {"ftmo", "fundedNext", "e8Funding", "myForexFunds", "custom"} <= set(firms)

    def test_ftmo_phases(self) -> None:
        profile = ConfigLoader.create().load_firm_profile("ftmo")

        assert profile.name == "FTMO"
        assert [p.name for p in profile.phases] == ["Challenge", "Verification", "Funded"]
        assert profile.funded_phase.payout_split == 80.0
        assert len(profile.evaluation_phases) == 2

    def test_unknown_firm_is_custom(self) -> None:
        profile = ConfigLoader.create().load_firm_profile("nobody")
        assert profile.firm_id == "custom"

    def test_missing_firms_file(self, tmp_path) -> None:
        loader = ConfigLoader.create(tmp_path)

        profile = loader.load_firm_profile("ftmo")

        assert loader.available_firms() == []
        assert profile.funded_phase.payout_split == 80.0
        assert loader.load_firm_config("ftmo") == {}

    def test_custom_firms_file(self, tmp_path) -> None:
        (tmp_path / "firms.yaml").write_text(
            "firms:\n"
            "  acme:\n"
            "    name: Acme\n"
            "    phases:\n"
            "      - {name: Eval, profit_target: 8}\n"
            "      - {name: Funded, payout_split: 85}\n"
            "    overrides:\n"
            "      cascade:\n"
            "        steps: 6\n"
        )
        loader = ConfigLoader.create(tmp_path)

        assert loader.load("acme").cascade.steps == 6
        assert loader.load_firm_profile("acme").funded_phase.payout_split == 85.0


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_defaults_are_valid(self) -> None:
        config = ConfigLoader.create().merge_config()
        assert ConfigValidator.validate_config(config) == []

    def test_descending_thresholds_rejected(self) -> None:
        errors = ConfigValidator.validate_alert_params({"levels": [
            {"threshold": 75, "severity": "danger"},
            {"threshold": 50, "severity": "warning"},
        ]})

        assert [e.field for e in errors] == ["alerts.levels[1].threshold"]

    def test_unknown_severity_rejected(self) -> None:
        errors = ConfigValidator.validate_alert_params({"levels": [{"threshold": 50, "severity": "meh"}]})
        assert errors[0].field == "alerts.levels[0].severity"

    def test_cascade_warning_must_exceed_danger(self) -> None:
        errors = ConfigValidator.validate_cascade_params({"danger_losses": 2, "warning_losses": 2})
        assert errors[0].field == "cascade.warning_losses"

    @pytest.mark.parametrize("value", [0, -1.0, 150, "2"])
    def test_invalid_max_risk(self, value) -> None:
        errors = ConfigValidator.validate_checkpoint_params({"max_risk_per_trade_pct": value})

        assert len(errors) == 1
        assert errors[0].field == "checkpoint.max_risk_per_trade_pct"

    def test_milestone_profile_must_exist(self) -> None:
        errors = ConfigValidator.validate_recovery_params({
            "profiles": [{"name": "steady", "risk_per_trade_pct": 1.0, "trades_per_day": 1, "reward_to_risk": 1.0}],
            "milestone_profile": "conservative",
        })
        assert errors[0].field == "recovery.milestone_profile"

    def test_emotional_bands_descending(self) -> None:
        errors = ConfigValidator.validate_emotional_params({"bands": [
            {"min_score": 30, "multiplier": 0.5, "alert_level": "yellow"},
            {"min_score": 70, "multiplier": 1.0, "alert_level": "green"},
        ]})
        assert errors[0].field == "emotional.bands[1].min_score"

    def test_emotional_weights_positive(self) -> None:
        errors = ConfigValidator.validate_emotional_params({"sleep_weight": 0, "loss_streak_weight": 30})
        assert [e.field for e in errors] == ["emotional.sleep_weight"]

    def test_payout_scenarios_positive(self) -> None:
        errors = ConfigValidator.validate_payout_params({"monthly_profit_scenarios": [2, -5]})
        assert errors[0].field == "payout.monthly_profit_scenarios"
