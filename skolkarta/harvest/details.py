"""Per-school detail and statistics sub-resource fetches."""

from __future__ import annotations

import logging
from typing import Any

from skolkarta.common.config_loader import ApiConfig
from skolkarta.common.http import HttpClient, HttpRequestError, NotFoundError
from skolkarta.common.logging import get_logger, log_event

DETAIL_PART = "details"


def detail_url(api: ApiConfig, code: str) -> str:
    return f"{api.base_url}/school-units/{code}"


def statistics_url(api: ApiConfig, code: str, stage: str) -> str:
    return f"{api.base_url}/school-units/{code}/statistics/{stage}"


def fetch_body(
    client: HttpClient,
    url: str,
    *,
    api: ApiConfig,
    entity: str,
    logger: logging.Logger | None = None,
) -> dict[str, Any] | None:
    """Fetch one sub-resource body; any failure resolves to ``None``."""
    logger = logger or get_logger()
    try:
        payload = client.get_json(url, timeout=api.timeout)
    except NotFoundError:
        log_event(
            logger,
            f"sub-resource absent: {url}",
            level=logging.DEBUG,
            stage="fetch",
            event="SUBRESOURCE_MISSING",
            status="absent",
            entity=entity,
            error_code=NotFoundError.error_code,
        )
        return None
    except HttpRequestError as exc:
        log_event(
            logger,
            f"sub-resource failed after retries: {exc}",
            level=logging.WARNING,
            stage="fetch",
            event="SUBRESOURCE_MISSING",
            status="error",
            entity=entity,
            error_code=exc.error_code,
        )
        return None

    body = payload.get("body")
    return body if isinstance(body, dict) else None


def sub_resource_urls(api: ApiConfig, code: str, stages: tuple[str, ...]) -> dict[str, str]:
    """Map each part name (``details`` or a stage code) to its URL."""
    urls = {DETAIL_PART: detail_url(api, code)}
    for stage in stages:
        urls[stage] = statistics_url(api, code, stage)
    return urls


def merge_school_record(compact: dict, parts: dict[str, dict | None], stages: tuple[str, ...]) -> dict:
    """Combine the compact listing entry with whatever sub-resources resolved."""
    return {
        "schoolUnitCode": compact.get("schoolUnitCode"),
        "compactData": compact,
        "details": parts.get(DETAIL_PART),
        "statistics": {stage: parts.get(stage) for stage in stages},
    }
