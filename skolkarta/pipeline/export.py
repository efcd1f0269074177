"""Deterministic ordering and serialisation of the processed snapshot."""

from __future__ import annotations

from pathlib import Path

from skolkarta.common.fs import write_json
from skolkarta.pipeline.classify import CATEGORY_ORDER, CATEGORY_PRIORITY


def performance_proxy(school: dict) -> float:
    stats = school["statistics"]
    if stats.get("meritValue") is not None:
        return stats["meritValue"]
    if stats.get("passRateGrade6") is not None:
        return stats["passRateGrade6"]
    return 0.0


def sort_key(school: dict) -> tuple[int, float, str]:
    return (
        CATEGORY_PRIORITY[school["category"]],
        -performance_proxy(school),
        school["id"],
    )


def sort_schools(schools: list[dict]) -> list[dict]:
    return sorted(schools, key=sort_key)


def has_grade6_data(school: dict) -> bool:
    stats = school["statistics"]
    return stats.get("passRateGrade6") is not None or stats.get("avgTestSwedish6") is not None


def category_counts(schools: list[dict]) -> dict[str, int]:
    counts = {category: 0 for category in CATEGORY_ORDER}
    for school in schools:
        counts[school["category"]] += 1
    return counts


def build_metadata(schools: list[dict], *, fetched_at: str, processed_at: str) -> dict:
    return {
        "fetchedAt": fetched_at,
        "processedAt": processed_at,
        "totalSchools": len(schools),
        "categoryCounts": category_counts(schools),
        "withMeritData": sum(1 for s in schools if s["statistics"].get("meritValue") is not None),
        "withGrade6Data": sum(1 for s in schools if has_grade6_data(s)),
        "withGymnasiumData": sum(1 for s in schools if s["statistics"].get("gymnasium") is not None),
    }


def write_processed_snapshot(path: Path, schools: list[dict], metadata: dict) -> Path:
    write_json(path, {"metadata": metadata, "schools": schools})
    return path
