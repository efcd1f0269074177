"""Swedish-locale numeric parsing and observation series selection."""

from __future__ import annotations

import math
import re
from typing import Iterable

from skolkarta.common.models import Observation

NO_VALUE_MARKERS = {".", "-"}
HISTORY_LIMIT = 5
YEAR_RE = re.compile(r"\d{4}")


def parse_swedish_number(value: str | None) -> float | None:
    """Parse ``"217,6"`` as ``217.6``.

    Sentinels, blanks and anything unparseable give ``None``, never zero.
    """
    if value is None:
        return None
    text = value.strip()
    if not text or text in NO_VALUE_MARKERS:
        return None
    try:
        parsed = float(text.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def period_year(period: str) -> int:
    match = YEAR_RE.search(period)
    return int(match.group(0)) if match else -1


def newest_first(series: Iterable[Observation]) -> list[Observation]:
    # Stable sort: periods sharing a year (or lacking one) keep source order.
    return sorted(series, key=lambda obs: period_year(obs.time_period), reverse=True)


def has_value(series: Iterable[Observation]) -> bool:
    return any(obs.exists for obs in series)


def most_recent_value(series: Iterable[Observation]) -> float | None:
    for obs in newest_first(series):
        if obs.exists:
            return parse_swedish_number(obs.value)
    return None


def value_history(series: Iterable[Observation], limit: int = HISTORY_LIMIT) -> list[dict]:
    history = []
    for obs in newest_first(series):
        if not obs.exists:
            continue
        parsed = parse_swedish_number(obs.value)
        history.append({"year": obs.time_period, "value": parsed if parsed is not None else 0.0})
        if len(history) >= limit:
            break
    return history


def mean_of_present(values: Iterable[float | None]) -> float | None:
    present = [value for value in values if value is not None]
    if not present:
        return None
    return sum(present) / len(present)
