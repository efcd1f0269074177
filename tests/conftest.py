from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from skolkarta.common.config_loader import PipelineConfig, load_pipeline_config
from skolkarta.common.http import RetryConfig

REPO_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """Repository config with every pacing delay and backoff set to zero."""
    config = load_pipeline_config(REPO_CONFIG_DIR)
    return replace(
        config,
        retry=RetryConfig(max_attempts=3, rate_limit_wait=0.0, error_wait=0.0),
        fetch=replace(config.fetch, batch_delay_seconds=0.0, page_delay_seconds=0.0),
    )
