"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from skolkarta.common.errors import ConfigError
from skolkarta.common.fs import read_yaml
from skolkarta.common.http import RetryConfig, TimeoutConfig
from skolkarta.common.schema import SECTIONS, validate_pipeline_config

CONFIG_FILENAME = "pipeline.yml"


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    accept_header: str
    coordinate_system: str
    page_size: int
    timeout: TimeoutConfig


@dataclass(frozen=True)
class FetchConfig:
    batch_size: int
    batch_delay_seconds: float
    page_delay_seconds: float
    progress_every: int
    stages: tuple[str, ...]


@dataclass(frozen=True)
class OutputConfig:
    raw_dir: str
    compact_filename: str
    raw_filename: str
    fetch_meta_filename: str
    processed_filename: str

    def raw_path(self, data_dir: Path) -> Path:
        return data_dir / self.raw_dir / self.raw_filename

    def compact_path(self, data_dir: Path) -> Path:
        return data_dir / self.raw_dir / self.compact_filename

    def fetch_meta_path(self, data_dir: Path) -> Path:
        return data_dir / self.raw_dir / self.fetch_meta_filename

    def processed_path(self, data_dir: Path) -> Path:
        return data_dir / "out" / self.processed_filename


@dataclass(frozen=True)
class PipelineConfig:
    api: ApiConfig
    retry: RetryConfig
    fetch: FetchConfig
    output: OutputConfig


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
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    return _deep_merge(base, overlay)


def build_pipeline_config(cfg: dict) -> PipelineConfig:
    api = cfg["api"]
    retry = cfg["retry"]
    fetch = cfg["fetch"]
    output = cfg["output"]
    return PipelineConfig(
        api=ApiConfig(
            base_url=str(api["base_url"]).rstrip("/"),
            accept_header=str(api["accept_header"]),
            coordinate_system=str(api["coordinate_system"]),
            page_size=int(api["page_size"]),
            timeout=TimeoutConfig(
                connect=float(api["timeouts"]["connect"]),
                read=float(api["timeouts"]["read"]),
            ),
        ),
        retry=RetryConfig(
            max_attempts=int(retry["max_attempts"]),
            rate_limit_wait=float(retry["rate_limit_wait"]),
            error_wait=float(retry["error_wait"]),
        ),
        fetch=FetchConfig(
            batch_size=int(fetch["batch_size"]),
            batch_delay_seconds=float(fetch["batch_delay_seconds"]),
            page_delay_seconds=float(fetch["page_delay_seconds"]),
            progress_every=int(fetch["progress_every"]),
            stages=tuple(str(stage) for stage in fetch["stages"]),
        ),
        output=OutputConfig(**{key: str(output[key]) for key in SECTIONS["output"]}),
    )


def load_pipeline_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> PipelineConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    raw = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    validated = validate_pipeline_config(raw, allow_unknown=allow_unknown)
    return build_pipeline_config(validated)
