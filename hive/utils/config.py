"""
hive/utils/config.py - Monorepo settings

Parses the optional hive.yaml at the monorepo root and provides typed access
to the settings the commands share. A missing file means defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class HealthCheckSettings:
    """How long to poll a freshly started container before giving up."""

    max_attempts: int = 30
    interval: float = 2.0


@dataclass
class HiveSettings:
    """Top-level hive configuration."""

    vendor: str = "phphive"
    container_prefix: str = "phphive"
    template_url: str = "https://github.com/pixielity-inc/hive-template.git"
    apps_dir: str = "apps"
    packages_dir: str = "packages"
    min_php_version: str = "8.2"
    health_check: HealthCheckSettings = field(default_factory=HealthCheckSettings)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

CONFIG_FILENAME = "hive.yaml"


def _to_int(val: Any, default: int) -> int:
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


def _to_float(val: Any, default: float) -> float:
    try:
        return float(val)
    except (ValueError, TypeError):
        return default


def _settings_from_dict(data: dict[str, Any]) -> HiveSettings:
    """Build HiveSettings from a raw YAML dict, ignoring unknown keys."""
    defaults = HiveSettings()
    health_raw = data.get("health_check") or {}
    if not isinstance(health_raw, dict):
        health_raw = {}

    return HiveSettings(
        vendor=str(data.get("vendor") or defaults.vendor),
        container_prefix=str(data.get("container_prefix") or defaults.container_prefix),
        template_url=str(data.get("template_url") or defaults.template_url),
        apps_dir=str(data.get("apps_dir") or defaults.apps_dir),
        packages_dir=str(data.get("packages_dir") or defaults.packages_dir),
        min_php_version=str(data.get("min_php_version") or defaults.min_php_version),
        health_check=HealthCheckSettings(
            max_attempts=_to_int(health_raw.get("max_attempts"), defaults.health_check.max_attempts),
            interval=_to_float(health_raw.get("interval"), defaults.health_check.interval),
        ),
    )


def _settings_to_dict(settings: HiveSettings) -> dict[str, Any]:
    return {
        "vendor": settings.vendor,
        "container_prefix": settings.container_prefix,
        "template_url": settings.template_url,
        "apps_dir": settings.apps_dir,
        "packages_dir": settings.packages_dir,
        "min_php_version": settings.min_php_version,
        "health_check": {
            "max_attempts": settings.health_check.max_attempts,
            "interval": settings.health_check.interval,
        },
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_settings(root: Path | None = None) -> HiveSettings:
    """Load hive.yaml from *root*, falling back to defaults.

    A missing or unparsable file is not an error.
    """
    if root is None:
        return HiveSettings()
    config_path = root / CONFIG_FILENAME
    if not config_path.is_file():
        return HiveSettings()
    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return HiveSettings()
    if not isinstance(raw, dict):
        return HiveSettings()
    return _settings_from_dict(raw)


def save_settings(settings: HiveSettings, root: Path) -> Path:
    """Write *settings* to hive.yaml under *root*. Returns the path written."""
    config_path = root / CONFIG_FILENAME
    with open(config_path, "w") as f:
        yaml.dump(_settings_to_dict(settings), f, default_flow_style=False, sort_keys=False)
    return config_path
