"""Batched, paced fan-out of per-school fetches."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from skolkarta.common.config_loader import ApiConfig, FetchConfig
from skolkarta.common.http import HttpClient
from skolkarta.common.logging import get_logger, log_event
from skolkarta.harvest.details import DETAIL_PART, fetch_body, merge_school_record, sub_resource_urls


@dataclass
class BatchResult:
    records: list[dict] = field(default_factory=list)
    hits: dict[str, int] = field(default_factory=dict)


def chunked(values: Sequence[dict], size: int) -> Iterator[Sequence[dict]]:
    for i in range(0, len(values), size):
        yield values[i : i + size]


def max_in_flight(fetch: FetchConfig) -> int:
    """Upper bound on concurrent requests: one per sub-resource of one batch."""
    return fetch.batch_size * (1 + len(fetch.stages))


def _crossed(previous: int, current: int, every: int) -> bool:
    return current // every > previous // every


def fetch_in_batches(
    client: HttpClient,
    api: ApiConfig,
    fetch: FetchConfig,
    schools: Sequence[dict],
    *,
    logger: logging.Logger | None = None,
) -> BatchResult:
    """Fetch details and statistics for ``schools`` one batch at a time.

    Every sub-resource of every school in a batch is requested concurrently,
    the batch is drained completely, and the loop pauses before the next one.
    Each future writes into its own slot, so no state is shared between
    workers. Output order matches input order.
    """
    logger = logger or get_logger()
    parts = (DETAIL_PART, *fetch.stages)
    result = BatchResult(hits={part: 0 for part in parts})
    total = len(schools)
    processed = 0

    with ThreadPoolExecutor(max_workers=max_in_flight(fetch), thread_name_prefix="skolkarta-fetch") as executor:
        for batch_index, batch in enumerate(chunked(schools, fetch.batch_size)):
            if batch_index > 0:
                time.sleep(fetch.batch_delay_seconds)

            slots: list[dict[str, Future]] = []
            for compact in batch:
                code = str(compact.get("schoolUnitCode"))
                urls = sub_resource_urls(api, code, fetch.stages)
                slots.append(
                    {
                        part: executor.submit(fetch_body, client, url, api=api, entity=code, logger=logger)
                        for part, url in urls.items()
                    }
                )

            for compact, futures in zip(batch, slots):
                resolved = {part: future.result() for part, future in futures.items()}
                for part, body in resolved.items():
                    if body is not None:
                        result.hits[part] += 1
                result.records.append(merge_school_record(compact, resolved, fetch.stages))

            previous = processed
            processed += len(batch)
            if _crossed(previous, processed, fetch.progress_every) or processed == total:
                hits_text = ", ".join(f"{part}={count}" for part, count in result.hits.items())
                log_event(
                    logger,
                    f"processed {processed}/{total} - hits {hits_text}",
                    stage="fetch",
                    event="BATCH_PROGRESS",
                    status="ok",
                    processed=processed,
                    total=total,
                )

    return result
