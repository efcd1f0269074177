"""Process stage: raw snapshot in, classified and sorted snapshot out."""

from __future__ import annotations

import logging
from pathlib import Path

from skolkarta.common.config_loader import PipelineConfig
from skolkarta.common.errors import RawDataMissingError
from skolkarta.common.fs import read_json
from skolkarta.common.logging import get_logger, log_event
from skolkarta.common.models import RawSchoolRecord
from skolkarta.common.time_utils import utc_timestamp_iso
from skolkarta.pipeline.export import build_metadata, sort_schools, write_processed_snapshot
from skolkarta.pipeline.normalise import normalise_school
from skolkarta.pipeline.reports import build_summary, log_tally, write_run_summary
from skolkarta.pipeline.validate import validate_schools


def load_raw_snapshot(path: Path) -> list[RawSchoolRecord]:
    if not path.exists():
        raise RawDataMissingError(f"Raw data file not found at {path}. Run the fetch stage first.")
    payload = read_json(path)
    if not isinstance(payload, list):
        raise RawDataMissingError(f"Raw data file {path} is not a list of school records. Re-run the fetch stage.")
    return [RawSchoolRecord.from_payload(item) for item in payload]


def load_fetched_at(path: Path) -> str | None:
    if not path.exists():
        return None
    payload = read_json(path)
    fetched_at = payload.get("fetchedAt") if isinstance(payload, dict) else None
    return fetched_at if isinstance(fetched_at, str) else None


def normalise_all(records: list[RawSchoolRecord], logger: logging.Logger) -> list[dict]:
    schools: list[dict] = []
    seen: set[str] = set()
    skipped = 0
    for raw in records:
        if raw.code in seen:
            skipped += 1
            continue
        school = normalise_school(raw)
        if school is None:
            skipped += 1
            continue
        seen.add(raw.code)
        schools.append(school)
    if skipped:
        log_event(
            logger,
            f"skipped {skipped} raw records (duplicate id or unusable coordinates)",
            level=logging.WARNING,
            stage="process",
            event="RECORDS_SKIPPED",
            status="warn",
            total=skipped,
        )
    return schools


def run_process(
    config: PipelineConfig,
    data_dir: Path,
    run_id: str,
    *,
    logger: logging.Logger | None = None,
) -> dict:
    logger = logger or get_logger()
    output = config.output

    records = load_raw_snapshot(output.raw_path(data_dir))
    log_event(
        logger,
        f"loaded {len(records)} raw school records",
        run_id=run_id,
        stage="process",
        event="RAW_LOADED",
        status="ok",
        total=len(records),
    )

    schools = sort_schools(normalise_all(records, logger))
    validate_schools(schools)

    processed_at = utc_timestamp_iso()
    fetched_at = load_fetched_at(output.fetch_meta_path(data_dir)) or processed_at
    metadata = build_metadata(schools, fetched_at=fetched_at, processed_at=processed_at)
    write_processed_snapshot(output.processed_path(data_dir), schools, metadata)

    summary = build_summary(schools, metadata, run_id)
    write_run_summary(data_dir, summary)
    log_tally(logger, summary)
    return {"metadata": metadata, "schools": schools}
