#!/usr/bin/env python3
"""Verify that buildmail.example.yaml (or the given files) pass configuration validation."""

import sys
from pathlib import Path

import yaml

from buildmail.config import validate_config_file
from buildmail.config.validators import check_for_warnings


def verify(paths):
    """Validate each file, printing warnings for settings that are probably unintended."""
    all_valid = True

    for path in paths:
        if not path.exists():
            print(f"✗ {path} not found")
            all_valid = False
            continue

        if not validate_config_file(path):
            all_valid = False
            continue

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        for warning in check_for_warnings(raw):
            print(f"  ! {warning}")

    return all_valid


if __name__ == "__main__":
    targets = [Path(arg) for arg in sys.argv[1:]] or [Path("buildmail.example.yaml")]
    sys.exit(0 if verify(targets) else 1)
