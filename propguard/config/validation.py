"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any, Optional

VALID_SEVERITIES = ("warning", "danger", "critical")
VALID_ALERT_LEVELS = ("green", "yellow", "red")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_positive(params: dict[str, Any], name: str, prefix: str,
                    maximum: Optional[float] = None) -> list[ValidationError]:
    if name not in params:
        return []

    value = params[name]
    if not _is_number(value) or value <= 0 or (maximum is not None and value > maximum):
        message = "Must be a positive number"
        if maximum is not None:
            message += f" no greater than {maximum}"
        return [ValidationError(field=f"{prefix}.{name}", message=message, value=value)]
    return []


def _check_positive_int(params: dict[str, Any], name: str, prefix: str) -> list[ValidationError]:
    if name not in params:
        return []

    value = params[name]
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        return [ValidationError(field=f"{prefix}.{name}", message="Must be a positive integer", value=value)]
    return []


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_alert_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate breach alert ladder parameters."""
        errors = []

        levels = params.get("levels")
        if levels is None:
            return errors

        if not isinstance(levels, list) or not levels:
            errors.append(ValidationError(
                field="alerts.levels",
                message="Must be a non-empty list of levels",
                value=levels
            ))
            return errors

        previous = 0.0
        for index, level in enumerate(levels):
            threshold = level.get("threshold") if isinstance(level, dict) else None
            if not _is_number(threshold) or threshold <= previous or threshold > 100:
                errors.append(ValidationError(
                    field=f"alerts.levels[{index}].threshold",
                    message="Thresholds must be ascending numbers in (0, 100]",
                    value=threshold
                ))
            else:
                previous = threshold

            severity = level.get("severity") if isinstance(level, dict) else None
            if severity not in VALID_SEVERITIES:
                errors.append(ValidationError(
                    field=f"alerts.levels[{index}].severity",
                    message=f"Must be one of {', '.join(VALID_SEVERITIES)}",
                    value=severity
                ))

        return errors

    @staticmethod
    def validate_cascade_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate loss-cascade parameters."""
        errors = []
        errors.extend(_check_positive_int(params, "steps", "cascade"))
        errors.extend(_check_positive_int(params, "danger_losses", "cascade"))
        errors.extend(_check_positive_int(params, "warning_losses", "cascade"))

        danger = params.get("danger_losses")
        warning = params.get("warning_losses")
        if isinstance(danger, int) and isinstance(warning, int) and warning <= danger:
            errors.append(ValidationError(
                field="cascade.warning_losses",
                message="Must be greater than danger_losses",
                value=warning
            ))

        return errors

    @staticmethod
    def validate_checkpoint_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate pre-trade checkpoint parameters."""
        errors = []
        errors.extend(_check_positive(params, "max_risk_per_trade_pct", "checkpoint", maximum=100))
        errors.extend(_check_positive(params, "daily_budget_high_pct", "checkpoint", maximum=100))
        errors.extend(_check_positive(params, "daily_budget_medium_pct", "checkpoint", maximum=100))
        errors.extend(_check_positive(params, "default_pip_value", "checkpoint"))

        high = params.get("daily_budget_high_pct")
        medium = params.get("daily_budget_medium_pct")
        if _is_number(high) and _is_number(medium) and medium >= high:
            errors.append(ValidationError(
                field="checkpoint.daily_budget_medium_pct",
                message="Must be below daily_budget_high_pct",
                value=medium
            ))

        return errors

    @staticmethod
    def validate_recovery_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate recovery planner parameters."""
        errors = []
        errors.extend(_check_positive_int(params, "max_milestones", "recovery"))
        errors.extend(_check_positive(params, "max_recovery_risk_pct", "recovery", maximum=100))

        profiles = params.get("profiles", [])
        names = []
        for index, profile in enumerate(profiles):
            prefix = f"recovery.profiles[{index}]"
            if not isinstance(profile, dict):
                errors.append(ValidationError(field=prefix, message="Must be a mapping", value=profile))
                continue
            names.append(profile.get("name"))
            errors.extend(_check_positive(profile, "risk_per_trade_pct", prefix, maximum=100))
            errors.extend(_check_positive_int(profile, "trades_per_day", prefix))
            errors.extend(_check_positive(profile, "reward_to_risk", prefix))

        milestone_profile = params.get("milestone_profile")
        if profiles and milestone_profile is not None and milestone_profile not in names:
            errors.append(ValidationError(
                field="recovery.milestone_profile",
                message="Must name one of the configured profiles",
                value=milestone_profile
            ))

        return errors

    @staticmethod
    def validate_emotional_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate emotional risk adjuster parameters."""
        errors = []
        errors.extend(_check_positive_int(params, "history_limit", "emotional"))
        for name in ("mood_weight", "confidence_weight", "stress_weight", "sleep_weight",
                     "focus_weight", "positive_factor_weight", "neutral_mood_weight",
                     "loss_streak_weight", "win_streak_weight"):
            errors.extend(_check_positive(params, name, "emotional"))

        bands = params.get("bands", [])
        previous = None
        for index, band in enumerate(bands):
            prefix = f"emotional.bands[{index}]"
            if not isinstance(band, dict):
                errors.append(ValidationError(field=prefix, message="Must be a mapping", value=band))
                continue
            errors.extend(_check_positive(band, "multiplier", prefix, maximum=1.0))

            min_score = band.get("min_score")
            if not _is_number(min_score) or (previous is not None and min_score >= previous):
                errors.append(ValidationError(
                    field=f"{prefix}.min_score",
                    message="Bands must be ordered by descending min_score",
                    value=min_score
                ))
            else:
                previous = min_score

            if band.get("alert_level") not in VALID_ALERT_LEVELS:
                errors.append(ValidationError(
                    field=f"{prefix}.alert_level",
                    message=f"Must be one of {', '.join(VALID_ALERT_LEVELS)}",
                    value=band.get("alert_level")
                ))

        return errors

    @staticmethod
    def validate_phase_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate challenge phase parameters."""
        errors = []
        errors.extend(_check_positive_int(params, "challenge_days", "phase"))
        errors.extend(_check_positive(params, "on_track_slack", "phase", maximum=1.0))
        return errors

    @staticmethod
    def validate_payout_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate payout projection parameters."""
        errors = []
        errors.extend(_check_positive(params, "payout_split_pct", "payout", maximum=100))
        errors.extend(_check_positive(params, "scaling_monthly_return_pct", "payout", maximum=100))

        for name in ("monthly_profit_scenarios", "scaling_multipliers"):
            values = params.get(name)
            if values is None:
                continue
            if not isinstance(values, (list, tuple)) or not all(_is_number(v) and v > 0 for v in values):
                errors.append(ValidationError(
                    field=f"payout.{name}",
                    message="Must be a list of positive numbers",
                    value=values
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "alerts" in config:
            errors.extend(ConfigValidator.validate_alert_params(config["alerts"]))

        if "cascade" in config:
            errors.extend(ConfigValidator.validate_cascade_params(config["cascade"]))

        if "checkpoint" in config:
            errors.extend(ConfigValidator.validate_checkpoint_params(config["checkpoint"]))

        if "recovery" in config:
            errors.extend(ConfigValidator.validate_recovery_params(config["recovery"]))

        if "emotional" in config:
            errors.extend(ConfigValidator.validate_emotional_params(config["emotional"]))

        if "phase" in config:
            errors.extend(ConfigValidator.validate_phase_params(config["phase"]))

        if "payout" in config:
            errors.extend(ConfigValidator.validate_payout_params(config["payout"]))

        return errors
