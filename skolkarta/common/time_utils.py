"""UTC-focused helpers for run metadata."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def generate_run_id() -> str:
    # Sortable, filesystem-safe id.
    return utc_now().strftime("run-%Y%m%dT%H%M%S%fZ")
