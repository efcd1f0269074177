"""Gymnasium program aggregation and shared-figure fallback."""

from __future__ import annotations

from skolkarta.common.constants import (
    METRIC_ADMISSION_AVG,
    METRIC_ADMISSION_MIN,
    METRIC_CERTIFIED_TEACHERS,
    METRIC_ELIGIBILITY,
    METRIC_GRADE_POINTS,
    METRIC_GRADUATION,
    METRIC_STUDENTS_PER_TEACHER,
    METRIC_TOTAL_PUPILS,
)
from skolkarta.common.models import ProgramMetric, StatisticsBlock
from skolkarta.pipeline.values import mean_of_present, most_recent_value

HEADLINE_FIELDS = ("eligibilityRate", "gradePoints", "graduationRate")

PROGRAM_FIELDS = (
    ("eligibilityRate", METRIC_ELIGIBILITY),
    ("gradePoints", METRIC_GRADE_POINTS),
    ("graduationRate", METRIC_GRADUATION),
    ("admissionPointsAvg", METRIC_ADMISSION_AVG),
    ("admissionPointsMin", METRIC_ADMISSION_MIN),
)

COMMON_FIELDS = (
    ("studentsPerTeacher", METRIC_STUDENTS_PER_TEACHER),
    ("certifiedTeachersRatio", METRIC_CERTIFIED_TEACHERS),
    ("totalPupils", METRIC_TOTAL_PUPILS),
)


def summarise_program(program: ProgramMetric) -> dict:
    out: dict = {"code": program.program_code}
    for field_name, metric in PROGRAM_FIELDS:
        out[field_name] = most_recent_value(program.series(metric))
    return out


def summarise_programs(stats: StatisticsBlock | None) -> list[dict]:
    if stats is None:
        return []
    programs = [summarise_program(program) for program in stats.programs]
    return [p for p in programs if any(p[field_name] is not None for field_name in HEADLINE_FIELDS)]


def aggregate_gymnasium(stats: StatisticsBlock | None) -> dict | None:
    """Average each headline figure over the programs that report it.

    Programs lacking a figure drop out of that figure's mean instead of
    counting as zero. ``None`` when no program survives.
    """
    programs = summarise_programs(stats)
    if not programs:
        return None
    out: dict = {
        field_name: mean_of_present(p[field_name] for p in programs) for field_name in HEADLINE_FIELDS
    }
    out["programs"] = programs
    return out


def common_figures(primary: StatisticsBlock | None, secondary: StatisticsBlock | None) -> dict:
    out = {}
    for field_name, metric in COMMON_FIELDS:
        value = most_recent_value(primary.series(metric)) if primary is not None else None
        if value is None and secondary is not None:
            value = most_recent_value(secondary.series(metric))
        out[field_name] = value
    return out
