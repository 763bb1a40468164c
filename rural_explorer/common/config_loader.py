"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rural_explorer.common.errors import ConfigError
from rural_explorer.common.fs import read_yaml
from rural_explorer.common.schema import validate_dashboard_config

CONFIG_FILENAME = "dashboard.yml"


@dataclass(frozen=True)
class DashboardConfig:
    headers: dict[str, str]
    placeholders: dict[str, str]
    aggregation: dict
    source: dict
    http: dict


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> DashboardConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    cfg = validate_dashboard_config(cfg, allow_unknown=allow_unknown)
    return DashboardConfig(
        headers=dict(cfg["headers"]),
        placeholders=dict(cfg["placeholders"]),
        aggregation=dict(cfg["aggregation"]),
        source=dict(cfg["source"]),
        http=dict(cfg["http"]),
    )


def resolve_snapshot(config: DashboardConfig, requested: str | None) -> str:
    if requested:
        return requested
    return config.source["default_snapshot"]
