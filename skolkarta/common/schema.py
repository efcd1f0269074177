"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from skolkarta.common.constants import STAGE_PRIMARY, STAGE_SECONDARY
from skolkarta.common.errors import ConfigError

KNOWN_STAGES = {STAGE_PRIMARY, STAGE_SECONDARY}


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
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


def _assert_positive(value: object, ctx: str, *, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{ctx} must be a number")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(f"{ctx} must be {'non-negative' if allow_zero else 'positive'}")


SECTIONS: dict[str, set[str]] = {
    "api": {"base_url", "accept_header", "coordinate_system", "page_size", "timeouts"},
    "retry": {"max_attempts", "rate_limit_wait", "error_wait"},
    "fetch": {"batch_size", "batch_delay_seconds", "page_delay_seconds", "progress_every", "stages"},
    "output": {"raw_dir", "compact_filename", "raw_filename", "fetch_meta_filename", "processed_filename"},
}


def validate_pipeline_config(cfg: object, *, allow_unknown: bool = False) -> dict:
    cfg = _assert_mapping(cfg, "pipeline config")
    _assert_required_keys(cfg, set(SECTIONS), "pipeline config")
    _assert_no_unknown_keys(cfg, set(SECTIONS), "pipeline config", allow_unknown)

    for section, keys in SECTIONS.items():
        body = _assert_mapping(cfg[section], section)
        _assert_required_keys(body, keys, section)
        _assert_no_unknown_keys(body, keys, section, allow_unknown)

    _assert_required_keys(_assert_mapping(cfg["api"]["timeouts"], "api.timeouts"), {"connect", "read"}, "api.timeouts")
    _assert_positive(cfg["api"]["page_size"], "api.page_size")
    _assert_positive(cfg["retry"]["max_attempts"], "retry.max_attempts")
    _assert_positive(cfg["retry"]["rate_limit_wait"], "retry.rate_limit_wait", allow_zero=True)
    _assert_positive(cfg["retry"]["error_wait"], "retry.error_wait", allow_zero=True)
    _assert_positive(cfg["fetch"]["batch_size"], "fetch.batch_size")
    _assert_positive(cfg["fetch"]["progress_every"], "fetch.progress_every")
    _assert_positive(cfg["fetch"]["batch_delay_seconds"], "fetch.batch_delay_seconds", allow_zero=True)
    _assert_positive(cfg["fetch"]["page_delay_seconds"], "fetch.page_delay_seconds", allow_zero=True)

    stages = cfg["fetch"]["stages"]
    if not isinstance(stages, list) or not stages:
        raise ConfigError("fetch.stages must be a non-empty list")
    unknown_stages = set(stages) - KNOWN_STAGES
    if unknown_stages:
        raise ConfigError(f"Unknown statistics stages: {', '.join(sorted(unknown_stages))}")
    if len(set(stages)) != len(stages):
        raise ConfigError("fetch.stages must not repeat a stage")

    return cfg
