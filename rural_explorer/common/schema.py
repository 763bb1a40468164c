"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from rural_explorer.common.constants import DEFAULT_HEADERS
from rural_explorer.common.errors import ConfigError

AREA_POLICIES = ("fold_zero", "exclude_zero")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_headers(headers: dict, *, allow_unknown: bool = False) -> dict:
    _assert_required_keys(headers, set(DEFAULT_HEADERS), "headers")
    _assert_no_unknown_keys(headers, set(DEFAULT_HEADERS), "headers", allow_unknown)
    for field, header in headers.items():
        if not isinstance(header, str) or not header:
            raise ConfigError(f"headers.{field} must be a non-empty string")

    exact = [headers[field] for field in DEFAULT_HEADERS]
    dupes = {name for name in exact if exact.count(name) > 1}
    if dupes:
        raise ConfigError(f"Duplicate header names: {', '.join(sorted(dupes))}")
    return headers


def validate_dashboard_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"headers", "placeholders", "aggregation", "source", "http"}
    _assert_required_keys(cfg, top_required, "dashboard config")
    _assert_no_unknown_keys(cfg, top_required, "dashboard config", allow_unknown)

    validate_headers(cfg["headers"], allow_unknown=allow_unknown)
    _assert_required_keys(cfg["placeholders"], {"address", "category", "url"}, "placeholders")
    _assert_required_keys(cfg["aggregation"], {"top_n", "area_policy", "highlight_score"}, "aggregation")
    _assert_required_keys(
        cfg["source"],
        {"path_templates", "default_snapshot", "snapshots", "watchdog_seconds"},
        "source",
    )
    _assert_required_keys(cfg["http"], {"connect_timeout", "read_timeout", "max_attempts"}, "http")

    aggregation = cfg["aggregation"]
    if aggregation["area_policy"] not in AREA_POLICIES:
        raise ConfigError(
            f"aggregation.area_policy must be one of {', '.join(AREA_POLICIES)}, "
            f"got {aggregation['area_policy']!r}"
        )
    if not isinstance(aggregation["top_n"], int) or aggregation["top_n"] < 0:
        raise ConfigError("aggregation.top_n must be a non-negative integer")

    templates = cfg["source"]["path_templates"]
    if not isinstance(templates, list) or not templates:
        raise ConfigError("source.path_templates must be a non-empty list")
    for template in templates:
        if "{name}" not in template:
            raise ConfigError(f"source.path_templates entry lacks {{name}}: {template}")

    if int(cfg["http"]["max_attempts"]) < 1:
        raise ConfigError("http.max_attempts must be at least 1")

    return cfg
