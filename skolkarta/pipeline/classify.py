"""School category classification.

Signals are tried in decreasing order of reliability and the first match
wins:

1. upper-secondary code, name keyword or gymnasium program statistics
2. special-needs code or name keyword
3. which grade 9 / grade 6 statistics actually carry values
4. school years declared on the grundskola schooling type
5. grade ranges written into the school name
6. any grundskola statistics at all (assumed F-6)
"""

from __future__ import annotations

from skolkarta.common.constants import (
    GRADE_6_TEST_METRICS,
    METRIC_MERIT_9,
    METRIC_PASS_RATE_6,
    METRIC_PASS_RATE_9,
    SCHOOLING_PRIMARY,
    SCHOOLING_SPECIAL_NEEDS,
    SCHOOLING_UPPER_SECONDARY,
    STAGE_PRIMARY,
    STAGE_SECONDARY,
)
from skolkarta.common.models import RawSchoolRecord, StatisticsBlock
from skolkarta.pipeline.values import has_value

CATEGORY_F9 = "F-9"
CATEGORY_79 = "7-9"
CATEGORY_F6 = "F-6"
CATEGORY_GYMNASIUM = "gymnasium"
CATEGORY_SPECIAL_NEEDS = "anpassad"
CATEGORY_OTHER = "other"

# Output order of the processed snapshot.
CATEGORY_ORDER = (
    CATEGORY_F9,
    CATEGORY_79,
    CATEGORY_F6,
    CATEGORY_GYMNASIUM,
    CATEGORY_SPECIAL_NEEDS,
    CATEGORY_OTHER,
)
CATEGORY_PRIORITY = {category: idx for idx, category in enumerate(CATEGORY_ORDER)}

UPPER_SECONDARY_KEYWORDS = ("gymnasium", "gymnasie")
SPECIAL_NEEDS_KEYWORDS = ("anpassad",)
LOW_GRADES = {"1", "2", "3"}

NAME_PATTERNS = (
    (CATEGORY_F9, ("f-9", "f–9")),
    (CATEGORY_F6, ("f-6", "f–6", "f-3")),
    (CATEGORY_79, ("7-9", "högstadium")),
)


def _grade9_signal(stats: StatisticsBlock | None) -> bool:
    if stats is None:
        return False
    return has_value(stats.series(METRIC_MERIT_9)) or has_value(stats.series(METRIC_PASS_RATE_9))


def _grade6_signal(stats: StatisticsBlock | None) -> bool:
    if stats is None:
        return False
    names = (METRIC_PASS_RATE_6, *GRADE_6_TEST_METRICS)
    return any(has_value(stats.series(name)) for name in names)


def _from_statistics(stats: StatisticsBlock | None) -> str | None:
    grade9 = _grade9_signal(stats)
    grade6 = _grade6_signal(stats)
    if grade9 and grade6:
        return CATEGORY_F9
    if grade9:
        return CATEGORY_79
    if grade6:
        return CATEGORY_F6
    return None


def _from_school_years(raw: RawSchoolRecord) -> str | None:
    if raw.detail is None:
        return None
    grundskola = raw.detail.schooling(SCHOOLING_PRIMARY)
    if grundskola is None:
        return None
    years = set(grundskola.school_years)
    has_low = bool(years & LOW_GRADES)
    if "9" in years and has_low:
        return CATEGORY_F9
    if "9" in years:
        return CATEGORY_79
    if "6" in years or has_low:
        return CATEGORY_F6
    return None


def _from_name(name: str) -> str | None:
    for category, patterns in NAME_PATTERNS:
        if any(pattern in name for pattern in patterns):
            return category
    return None


def determine_category(raw: RawSchoolRecord) -> str:
    name = raw.compact.name.lower()
    codes = raw.detail.schooling_codes if raw.detail is not None else set()
    primary = raw.stage(STAGE_PRIMARY)
    secondary = raw.stage(STAGE_SECONDARY)

    if (
        SCHOOLING_UPPER_SECONDARY in codes
        or any(keyword in name for keyword in UPPER_SECONDARY_KEYWORDS)
        or (secondary is not None and secondary.has_programs())
    ):
        return CATEGORY_GYMNASIUM

    if SCHOOLING_SPECIAL_NEEDS in codes or any(keyword in name for keyword in SPECIAL_NEEDS_KEYWORDS):
        return CATEGORY_SPECIAL_NEEDS

    category = _from_statistics(primary) or _from_school_years(raw) or _from_name(name)
    if category is not None:
        return category

    if primary is not None and not primary.is_empty():
        return CATEGORY_F6

    return CATEGORY_OTHER
