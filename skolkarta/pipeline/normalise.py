"""Turn one decoded raw record into a processed snapshot record."""

from __future__ import annotations

from skolkarta.common.constants import (
    METRIC_MERIT_9,
    METRIC_PASS_RATE_6,
    METRIC_PASS_RATE_9,
    METRIC_TEST_ENGLISH_6,
    METRIC_TEST_MATH_6,
    METRIC_TEST_SWEDISH_6,
    MUNICIPAL_ORGANIZER,
    STAGE_PRIMARY,
    STAGE_SECONDARY,
    UNKNOWN_MUNICIPALITY,
)
from skolkarta.common.models import RawSchoolRecord
from skolkarta.pipeline.aggregate import aggregate_gymnasium, common_figures
from skolkarta.pipeline.classify import determine_category
from skolkarta.pipeline.values import most_recent_value, value_history

OWNERSHIP_MUNICIPAL = "municipal"
OWNERSHIP_INDEPENDENT = "independent"


def _grade_sort_key(grade: str) -> tuple[int, str]:
    # Förskoleklass ("0") first, numeric grades next, anything else last.
    if grade == "0":
        return -1, grade
    try:
        return int(grade), grade
    except ValueError:
        return 99, grade


def sorted_grades(raw: RawSchoolRecord) -> list[str]:
    if raw.detail is None:
        return []
    grades = {year for schooling in raw.detail.schooling_types for year in schooling.school_years}
    return sorted(grades, key=_grade_sort_key)


def school_types(raw: RawSchoolRecord) -> list[str]:
    if raw.detail is None:
        return []
    return [s.display_name for s in raw.detail.schooling_types if s.display_name]


def normalise_school(raw: RawSchoolRecord) -> dict | None:
    """Build the output record, or ``None`` when the coordinates are unusable."""
    coords = raw.compact.coordinates()
    if coords is None:
        return None

    detail = raw.detail
    visiting = detail.visiting_address if detail is not None else None
    primary = raw.stage(STAGE_PRIMARY)
    secondary = raw.stage(STAGE_SECONDARY)

    def primary_value(metric: str) -> float | None:
        return most_recent_value(primary.series(metric)) if primary is not None else None

    merit_series = primary.series(METRIC_MERIT_9) if primary is not None else ()
    statistics = {
        "meritValue": most_recent_value(merit_series),
        "meritHistory": value_history(merit_series),
        "passRateGrade9": primary_value(METRIC_PASS_RATE_9),
        "passRateGrade6": primary_value(METRIC_PASS_RATE_6),
        "avgTestSwedish6": primary_value(METRIC_TEST_SWEDISH_6),
        "avgTestEnglish6": primary_value(METRIC_TEST_ENGLISH_6),
        "avgTestMath6": primary_value(METRIC_TEST_MATH_6),
        "gymnasium": aggregate_gymnasium(secondary),
    }
    statistics.update(common_figures(primary, secondary))

    ownership = OWNERSHIP_INDEPENDENT
    if detail is not None and detail.principal_organizer_type == MUNICIPAL_ORGANIZER:
        ownership = OWNERSHIP_MUNICIPAL

    return {
        "id": raw.code,
        "name": raw.compact.name,
        "coordinates": [coords[0], coords[1]],
        "municipality": (visiting.city if visiting is not None else None) or UNKNOWN_MUNICIPALITY,
        "ownership": ownership,
        "category": determine_category(raw),
        "schoolTypes": school_types(raw),
        "grades": sorted_grades(raw),
        "address": {
            "street": (visiting.street if visiting is not None else None) or "",
            "postalCode": (visiting.zip_code if visiting is not None else None) or "",
            "city": (visiting.city if visiting is not None else None) or "",
        },
        "statistics": statistics,
    }
