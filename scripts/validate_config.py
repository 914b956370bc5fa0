#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from propguard.config.loader import ConfigLoader
from propguard.config.validation import ConfigValidator, ValidationError


def validate_firm_config(loader: ConfigLoader, firm_id: str) -> List[ValidationError]:
    """Validate the merged configuration for a firm."""
    config = loader.merge_config(firm_id)
    errors = ConfigValidator.validate_config(config)

    # The typed build catches keys with the wrong shape
    loader.build_config(config)

    profile = loader.load_firm_profile(firm_id)
    if not profile.phases:
        errors.append(ValidationError(field=f"firms.{firm_id}.phases", message="No phases defined", value=[]))
    return errors


def main():
    """Main validation function."""
    print("🔍 Validating PropGuard configuration...")

    loader = ConfigLoader.create()
    firms = loader.available_firms() + ["UNKNOWN-FIRM"]  # Should use defaults

    all_valid = True

    for firm_id in firms:
        print(f"\n🏦 Validating {firm_id}...")

        try:
            errors = validate_firm_config(loader, firm_id)

            if errors:
                print(f"❌ Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  • {error.field}: {error.message} (value: {error.value})")
                all_valid = False
            else:
                profile = loader.load_firm_profile(firm_id)
                split = profile.funded_phase.payout_split if profile.funded_phase else 0
                print(f"✅ {firm_id} configuration is valid ({len(profile.phases)} phases, {split:g}% split)")

        except Exception as e:
            print(f"❌ Error validating {firm_id}: {e}")
            all_valid = False

    # Test account-level overrides
    print(f"\n📋 Testing account-level overrides...")
    test_overrides = {
        "checkpoint": {
            "max_risk_per_trade_pct": 1.0,
        },
        "cascade": {
            "steps": 15,
        },
    }

    try:
        config = loader.merge_config("ftmo", test_overrides)
        errors = ConfigValidator.validate_config(config)

        if errors:
            print(f"❌ Account override validation failed:")
            for error in errors:
                print(f"  • {error.field}: {error.message}")
            all_valid = False
        else:
            print(f"✅ Account override validation passed")

    except Exception as e:
        print(f"❌ Error testing account overrides: {e}")
        all_valid = False

    if all_valid:
        print(f"\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print(f"\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
