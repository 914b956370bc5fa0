#!/usr/bin/env python3
"""Development setup script for PropGuard."""

import subprocess
import sys
from pathlib import Path


def run_command(cmd: str, description: str) -> bool:
    """Run a command and return success status."""
    print(f"🔧 {description}...")
    try:
        subprocess.run(cmd, shell=True, check=True, capture_output=True, text=True)
        print(f"✅ {description} completed successfully")
        return True
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed:")
        print(f"Command: {cmd}")
        print(f"Error: {e.stderr}")
        return False


def main():
    """Main setup function."""
    print("🚀 Setting up PropGuard development environment...")

    if not Path("pyproject.toml").exists():
        print("❌ No pyproject.toml found. Please run this script from the project root.")
        sys.exit(1)

    if not run_command(f"{sys.executable} -m pip install -e '.[test]'", "Installing package and test dependencies"):
        sys.exit(1)

    if not run_command(f"{sys.executable} scripts/validate_config.py", "Validating firm configuration"):
        print("⚠️  Configuration has errors. Review config/firms.yaml.")

    if not run_command(f"{sys.executable} -m pytest", "Running test suite"):
        print("⚠️  Some tests failed. Please review and fix.")

    if not run_command(f"{sys.executable} scripts/smoke_test.py", "Running example smoke tests"):
        print("⚠️  Some examples failed. Run 'python scripts/smoke_test.py' for details.")

    print("\n🎉 Development environment setup complete!")
    print("\nNext steps:")
    print("1. Review any warnings above")
    print("2. Run tests with: python -m pytest")
    print("3. Try the demos in examples/")


if __name__ == "__main__":
    main()
