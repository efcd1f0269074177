"""Fetch stage: catalog, filter, batched sub-resource fetch, raw snapshot."""

from __future__ import annotations

import logging
from pathlib import Path

from skolkarta.common.config_loader import PipelineConfig
from skolkarta.common.fs import write_json
from skolkarta.common.http import HttpClient
from skolkarta.common.logging import get_logger, log_event
from skolkarta.common.models import CompactEntity
from skolkarta.common.time_utils import utc_timestamp_iso
from skolkarta.harvest.batch import fetch_in_batches, max_in_flight
from skolkarta.harvest.catalog import fetch_compact_school_units


def filter_mappable(units: list[dict]) -> list[dict]:
    return [unit for unit in units if CompactEntity.from_payload(unit).is_mappable()]


def build_http_client(config: PipelineConfig, logger: logging.Logger) -> HttpClient:
    return HttpClient(
        timeout=config.api.timeout,
        retry=config.retry,
        accept_header=config.api.accept_header,
        logger=logger,
        pool_maxsize=max_in_flight(config.fetch),
    )


def run_fetch(
    config: PipelineConfig,
    data_dir: Path,
    run_id: str,
    *,
    http_client: HttpClient | None = None,
    logger: logging.Logger | None = None,
) -> dict:
    logger = logger or get_logger()
    output = config.output

    owns_client = http_client is None
    client = http_client or build_http_client(config, logger)
    try:
        units = fetch_compact_school_units(
            client,
            config.api,
            page_delay_seconds=config.fetch.page_delay_seconds,
            logger=logger,
        )
        write_json(output.compact_path(data_dir), units, sort_keys=False)

        mappable = filter_mappable(units)
        log_event(
            logger,
            f"{len(mappable)} of {len(units)} school units have usable coordinates",
            stage="fetch",
            event="CATALOG_FILTERED",
            status="ok",
            processed=len(mappable),
            total=len(units),
        )

        batches = fetch_in_batches(client, config.api, config.fetch, mappable, logger=logger)
    finally:
        if owns_client:
            client.close()

    write_json(output.raw_path(data_dir), batches.records, sort_keys=False)

    metadata = {
        "runId": run_id,
        "fetchedAt": utc_timestamp_iso(),
        "catalogCount": len(units),
        "filteredCount": len(mappable),
        "hits": batches.hits,
    }
    write_json(output.fetch_meta_path(data_dir), metadata)
    return metadata
