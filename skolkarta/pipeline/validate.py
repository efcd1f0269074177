"""Output contract checks for the processed snapshot."""

from __future__ import annotations

import math
from collections import Counter

from skolkarta.common.errors import ContractError
from skolkarta.pipeline.classify import CATEGORY_PRIORITY
from skolkarta.pipeline.normalise import OWNERSHIP_INDEPENDENT, OWNERSHIP_MUNICIPAL
from skolkarta.pipeline.values import HISTORY_LIMIT

OWNERSHIPS = {OWNERSHIP_MUNICIPAL, OWNERSHIP_INDEPENDENT}


def _non_finite_paths(value: object, path: str) -> list[str]:
    if isinstance(value, bool):
        return []
    if isinstance(value, float):
        return [] if math.isfinite(value) else [path]
    if isinstance(value, dict):
        return [p for key, child in value.items() for p in _non_finite_paths(child, f"{path}.{key}")]
    if isinstance(value, list):
        return [p for idx, child in enumerate(value) for p in _non_finite_paths(child, f"{path}[{idx}]")]
    return []


def contract_errors(schools: list[dict]) -> list[str]:
    errors: list[str] = []

    id_counts = Counter(school["id"] for school in schools)
    duplicates = sorted(code for code, count in id_counts.items() if count > 1)
    if duplicates:
        errors.append(f"DUPLICATE_IDS:{','.join(duplicates[:10])}")

    for school in schools:
        code = school["id"]
        if school["category"] not in CATEGORY_PRIORITY:
            errors.append(f"UNKNOWN_CATEGORY:{code}")
        if school["ownership"] not in OWNERSHIPS:
            errors.append(f"UNKNOWN_OWNERSHIP:{code}")
        if len(school["statistics"]["meritHistory"]) > HISTORY_LIMIT:
            errors.append(f"MERIT_HISTORY_TOO_LONG:{code}")
        for path in _non_finite_paths(school, code):
            errors.append(f"NON_FINITE_NUMBER:{path}")
    return errors


def validate_schools(schools: list[dict]) -> None:
    errors = contract_errors(schools)
    if errors:
        raise ContractError(";".join(errors))
