"""Load, validate, and hot-reload the gateway's endpoint configuration.

The config lives in ``endpoint_config.yaml`` alongside this module.  It is
loaded once and cached; ``reload_endpoint_config()`` re-reads it from disk.

Usage::

    from fitgate.fitbit.config_loader import get_endpoint_config

    config = get_endpoint_config()
    config.history_range("sleep_history")   # DayRange(min=1, max=90, default=30)
    config.max_span("hrv")                   # 30
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger("fitgate.fitbit.config")

_CONFIG_PATH = Path(__file__).parent / "endpoint_config.yaml"


@dataclass(frozen=True)
class DayRange:
    """Inclusive clamp range and fallback for one endpoint's day count."""

    min: int
    max: int
    default: int


@dataclass
class PagingConfig:
    max_limit: int = 100
    sleep_list_default: int = 7
    activity_logs_default: int = 20


@dataclass
class EndpointConfig:
    """Validated in-memory representation of endpoint_config.yaml.

    Attributes:
        version:             Config schema version string.
        history_ranges:      endpoint name → DayRange.
        max_span_days:       metric family → longest range the provider accepts.
        paging:              list endpoint limits.
        baseline_window_days: trailing window used for "vs usual" comparisons.
    """

    version: str
    history_ranges: dict[str, DayRange]
    max_span_days: dict[str, int]
    paging: PagingConfig
    baseline_window_days: int = 7
    _raw: dict = field(default_factory=dict, repr=False)

    def history_range(self, endpoint: str) -> DayRange:
        """Return the clamp range for an endpoint.

        Raises:
            KeyError: If the endpoint is not configured.
        """
        try:
            return self.history_ranges[endpoint]
        except KeyError:
            raise KeyError(
                f"No history range configured for '{endpoint}'. "
                f"Available: {sorted(self.history_ranges)}"
            ) from None

    def max_span(self, family: str) -> int | None:
        """Longest date span for a metric family, or None when unbounded."""
        return self.max_span_days.get(family)


class ConfigValidationError(ValueError):
    """Raised when endpoint_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Endpoint config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> EndpointConfig:
    """Validate the raw YAML dict and construct an EndpointConfig.

    All problems are collected and raised together.

    Raises:
        ConfigValidationError: If required sections are missing or invalid.
    """
    errors: list[str] = []

    version = str(raw.get("version", "1.0"))

    # ── History ranges ──
    ranges_raw = raw.get("history_ranges", {})
    if not ranges_raw:
        errors.append("'history_ranges' section is missing or empty")

    history_ranges: dict[str, DayRange] = {}
    for name, cfg in (ranges_raw or {}).items():
        if not isinstance(cfg, dict):
            errors.append(f"history_ranges.{name} must be a mapping with min/max/default")
            continue
        try:
            lo, hi, default = int(cfg["min"]), int(cfg["max"]), int(cfg["default"])
        except KeyError as exc:
            errors.append(f"history_ranges.{name} is missing key {exc}")
            continue
        except (TypeError, ValueError):
            errors.append(f"history_ranges.{name} values must be integers, got {cfg!r}")
            continue
        if lo < 1 or lo > hi:
            errors.append(f"history_ranges.{name}: need 1 <= min <= max, got [{lo}, {hi}]")
        elif not (lo <= default <= hi):
            errors.append(f"history_ranges.{name}: default {default} outside [{lo}, {hi}]")
        history_ranges[name] = DayRange(min=lo, max=hi, default=default)

    # ── Provider span limits ──
    max_span_days: dict[str, int] = {}
    for family, val in (raw.get("max_span_days") or {}).items():
        try:
            span = int(val)
        except (TypeError, ValueError):
            errors.append(f"max_span_days.{family} must be an integer, got {val!r}")
            continue
        if span < 1:
            errors.append(f"max_span_days.{family} must be positive, got {span}")
        max_span_days[family] = span

    # ── Paging ──
    pg_raw = raw.get("paging", {}) or {}
    paging = PagingConfig(
        max_limit=int(pg_raw.get("max_limit", 100)),
        sleep_list_default=int(pg_raw.get("sleep_list_default", 7)),
        activity_logs_default=int(pg_raw.get("activity_logs_default", 20)),
    )
    if paging.max_limit < 1:
        errors.append(f"paging.max_limit must be positive, got {paging.max_limit}")

    baseline_window_days = int((raw.get("baseline") or {}).get("window_days", 7))
    if baseline_window_days < 1:
        errors.append(f"baseline.window_days must be positive, got {baseline_window_days}")

    if errors:
        raise ConfigValidationError(
            f"endpoint_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return EndpointConfig(
        version=version,
        history_ranges=history_ranges,
        max_span_days=max_span_days,
        paging=paging,
        baseline_window_days=baseline_window_days,
        _raw=raw,
    )


def load_endpoint_config(path: Path | None = None) -> EndpointConfig:
    """Load and validate the endpoint config from disk."""
    target = path or _CONFIG_PATH
    config = _validate_and_build(_load_yaml(target))
    logger.info("Loaded endpoint config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: EndpointConfig | None = None
_config_lock = threading.Lock()


def get_endpoint_config() -> EndpointConfig:
    """Return the cached EndpointConfig, loading it on first call.  Thread-safe."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_endpoint_config()
    return _config


def reload_endpoint_config(path: Path | None = None) -> EndpointConfig:
    """Re-read the config and replace the cached instance.

    If validation fails the old config is kept and the error propagates.
    """
    global _config
    new_config = load_endpoint_config(path)
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded endpoint config: %s → %s", old_version, new_config.version)
    return new_config
