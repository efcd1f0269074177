"""Paged walk over the compact school unit listing."""

from __future__ import annotations

import logging
import time
from typing import Any

from skolkarta.common.config_loader import ApiConfig
from skolkarta.common.errors import CatalogFetchError
from skolkarta.common.http import HttpClient, HttpRequestError
from skolkarta.common.logging import get_logger, log_event

LISTING_PATH = "compact-school-units"
PROGRESS_EVERY_PAGES = 10


def _page_results(payload: dict[str, Any]) -> tuple[list[dict], int | None]:
    body = payload.get("body")
    if not isinstance(body, dict):
        return [], None
    embedded = body.get("_embedded")
    units = embedded.get("compactSchoolUnits") if isinstance(embedded, dict) else None
    results = [unit for unit in units if isinstance(unit, dict)] if isinstance(units, list) else []

    page = body.get("page")
    total_pages = None
    if isinstance(page, dict):
        try:
            total_pages = int(page.get("totalPages"))
        except (TypeError, ValueError):
            total_pages = None
    return results, total_pages


def fetch_compact_school_units(
    client: HttpClient,
    api: ApiConfig,
    *,
    page_delay_seconds: float = 0.05,
    logger: logging.Logger | None = None,
) -> list[dict]:
    """Return every compact school unit payload, in listing order.

    Paging stops once the page index reaches the ``totalPages`` reported by
    the first page that carries one. Any unrecovered page failure aborts the
    walk; a partial catalog is never returned.
    """
    logger = logger or get_logger()
    url = f"{api.base_url}/{LISTING_PATH}"
    units: list[dict] = []
    page = 0
    total_pages = 1
    total_known = False

    while page < total_pages:
        params = {"coordinateSystemType": api.coordinate_system, "page": page, "size": api.page_size}
        try:
            payload = client.get_json(url, params=params, timeout=api.timeout)
        except HttpRequestError as exc:
            raise CatalogFetchError(f"Listing page {page} failed: {exc}") from exc

        results, reported_pages = _page_results(payload)
        units.extend(results)
        if reported_pages is not None and not total_known:
            total_pages = reported_pages
            total_known = True

        page += 1
        if page % PROGRESS_EVERY_PAGES == 0 or page >= total_pages:
            log_event(
                logger,
                f"page {page}/{total_pages} - {len(units)} school units",
                stage="fetch",
                event="CATALOG_PAGE",
                status="ok",
                page=page,
                total=total_pages,
                processed=len(units),
            )

        if page < total_pages:
            time.sleep(page_delay_seconds)

    return units
