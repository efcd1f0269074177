"""Run report aggregation."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

from skolkarta.common.fs import write_json
from skolkarta.common.logging import log_event
from skolkarta.pipeline.classify import CATEGORY_79, CATEGORY_F6, CATEGORY_F9
from skolkarta.pipeline.export import performance_proxy

TOP_CATEGORIES = (CATEGORY_F9, CATEGORY_79, CATEGORY_F6)


def _top_by_category(schools: list[dict]) -> dict[str, dict | None]:
    # Input is already in snapshot order, so the first hit per category is the best.
    top: dict[str, dict | None] = {category: None for category in TOP_CATEGORIES}
    for school in schools:
        category = school["category"]
        if category in top and top[category] is None:
            top[category] = {"id": school["id"], "name": school["name"], "score": performance_proxy(school)}
    return top


def build_summary(schools: list[dict], metadata: dict, run_id: str) -> dict:
    merits = [s["statistics"]["meritValue"] for s in schools if s["statistics"]["meritValue"] is not None]
    ownership = Counter(s["ownership"] for s in schools)
    return {
        "run_id": run_id,
        "total_schools": len(schools),
        "category_counts": metadata["categoryCounts"],
        "with_merit_data": metadata["withMeritData"],
        "with_grade6_data": metadata["withGrade6Data"],
        "with_gymnasium_data": metadata["withGymnasiumData"],
        "ownership": dict(sorted(ownership.items())),
        "municipalities": len({s["municipality"] for s in schools}),
        "average_merit": round(sum(merits) / len(merits), 1) if merits else None,
        "top_by_category": _top_by_category(schools),
    }


def write_run_summary(data_dir: Path, summary: dict) -> Path:
    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    write_json(summary_path, summary)
    return summary_path


def log_tally(logger: logging.Logger, summary: dict) -> None:
    run_id = summary["run_id"]
    for category, count in summary["category_counts"].items():
        log_event(logger, f"{category}: {count}", run_id=run_id, stage="process", event="TALLY", status="ok", total=count)
    log_event(
        logger,
        (
            f"{summary['total_schools']} schools; merit data {summary['with_merit_data']}, "
            f"grade 6 data {summary['with_grade6_data']}, gymnasium data {summary['with_gymnasium_data']}"
        ),
        run_id=run_id,
        stage="process",
        event="TALLY",
        status="ok",
        total=summary["total_schools"],
    )
