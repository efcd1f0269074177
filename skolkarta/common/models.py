"""Data models used across the pipeline.

Wire payloads are decoded here, once, into frozen dataclasses with explicit
``None`` for anything the source left out. Downstream code never inspects raw
JSON dictionaries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from skolkarta.common.constants import VALUE_EXISTS, VISITING_ADDRESS


def _as_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_mapping(value: object) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: object) -> list:
    return value if isinstance(value, list) else []


def parse_coordinate(value: object) -> float | None:
    text = _as_str(value)
    if text is None:
        return None
    try:
        parsed = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


@dataclass(frozen=True)
class CompactEntity:
    code: str
    name: str
    latitude: str | None
    longitude: str | None
    abroad: bool

    @classmethod
    def from_payload(cls, payload: object) -> "CompactEntity":
        data = _as_mapping(payload)
        return cls(
            code=_as_str(data.get("schoolUnitCode")) or "",
            name=_as_str(data.get("schoolUnitName")) or "",
            latitude=_as_str(data.get("wgs84Latitude")),
            longitude=_as_str(data.get("wgs84Longitude")),
            abroad=bool(data.get("abroadSchool")),
        )

    def coordinates(self) -> tuple[float, float] | None:
        lat = parse_coordinate(self.latitude)
        lng = parse_coordinate(self.longitude)
        if lat is None or lng is None:
            return None
        return lat, lng

    def is_mappable(self) -> bool:
        """True for domestic units with parseable, non-zero coordinates."""
        coords = self.coordinates()
        if coords is None or self.abroad or not self.code:
            return False
        lat, lng = coords
        return lat != 0 and lng != 0


@dataclass(frozen=True)
class Address:
    type: str | None
    street: str | None
    zip_code: str | None
    city: str | None

    @classmethod
    def from_payload(cls, payload: object) -> "Address":
        data = _as_mapping(payload)
        return cls(
            type=_as_str(data.get("type")),
            street=_as_str(data.get("street")),
            zip_code=_as_str(data.get("zipCode")),
            city=_as_str(data.get("city")),
        )


@dataclass(frozen=True)
class SchoolingType:
    code: str | None
    display_name: str | None
    school_years: tuple[str, ...]

    @classmethod
    def from_payload(cls, payload: object) -> "SchoolingType":
        data = _as_mapping(payload)
        years = tuple(year for year in (_as_str(v) for v in _as_list(data.get("schoolYears"))) if year is not None)
        return cls(
            code=_as_str(data.get("code")),
            display_name=_as_str(data.get("displayName")),
            school_years=years,
        )


@dataclass(frozen=True)
class DetailRecord:
    code: str | None
    name: str | None
    principal_organizer_type: str | None
    addresses: tuple[Address, ...]
    schooling_types: tuple[SchoolingType, ...]

    @classmethod
    def from_payload(cls, payload: object) -> "DetailRecord | None":
        if not isinstance(payload, Mapping):
            return None
        contact = _as_mapping(payload.get("contactInfo"))
        return cls(
            code=_as_str(payload.get("code")),
            name=_as_str(payload.get("name")),
            principal_organizer_type=_as_str(payload.get("principalOrganizerType")),
            addresses=tuple(Address.from_payload(a) for a in _as_list(contact.get("addresses"))),
            schooling_types=tuple(SchoolingType.from_payload(s) for s in _as_list(payload.get("typeOfSchooling"))),
        )

    @property
    def visiting_address(self) -> Address | None:
        for address in self.addresses:
            if address.type == VISITING_ADDRESS:
                return address
        return None

    @property
    def schooling_codes(self) -> set[str]:
        return {s.code for s in self.schooling_types if s.code}

    def schooling(self, code: str) -> SchoolingType | None:
        for schooling in self.schooling_types:
            if schooling.code == code:
                return schooling
        return None


@dataclass(frozen=True)
class Observation:
    value: str | None
    value_type: str | None
    time_period: str

    @classmethod
    def from_payload(cls, payload: object) -> "Observation":
        data = _as_mapping(payload)
        return cls(
            value=_as_str(data.get("value")),
            value_type=_as_str(data.get("valueType")),
            time_period=_as_str(data.get("timePeriod")) or "",
        )

    @property
    def exists(self) -> bool:
        return self.value_type == VALUE_EXISTS


Series = tuple[Observation, ...]


def _decode_series(value: object) -> Series:
    return tuple(Observation.from_payload(item) for item in _as_list(value) if isinstance(item, Mapping))


def _decode_metrics(data: Mapping[str, Any], *, skip: set[str]) -> dict[str, Series]:
    metrics: dict[str, Series] = {}
    for key, value in data.items():
        # HAL link sections and scalar attributes are not metrics.
        if key in skip or key.startswith("_") or not isinstance(value, list):
            continue
        metrics[key] = _decode_series(value)
    return metrics


@dataclass(frozen=True)
class ProgramMetric:
    program_code: str | None
    metrics: dict[str, Series] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: object) -> "ProgramMetric":
        data = _as_mapping(payload)
        return cls(
            program_code=_as_str(data.get("programCode")),
            metrics=_decode_metrics(data, skip={"programCode"}),
        )

    def series(self, name: str) -> Series:
        return self.metrics.get(name, ())

    def is_empty(self) -> bool:
        return not any(self.metrics.values())


@dataclass(frozen=True)
class StatisticsBlock:
    metrics: dict[str, Series] = field(default_factory=dict)
    programs: tuple[ProgramMetric, ...] = ()

    @classmethod
    def from_payload(cls, payload: object) -> "StatisticsBlock | None":
        if not isinstance(payload, Mapping):
            return None
        return cls(
            metrics=_decode_metrics(payload, skip={"programMetrics"}),
            programs=tuple(ProgramMetric.from_payload(p) for p in _as_list(payload.get("programMetrics"))),
        )

    def series(self, name: str) -> Series:
        return self.metrics.get(name, ())

    def is_empty(self) -> bool:
        return not self.metrics and not self.programs

    def has_programs(self) -> bool:
        return any(not program.is_empty() for program in self.programs)


@dataclass(frozen=True)
class RawSchoolRecord:
    """One entity as persisted in the raw snapshot, decoded."""

    code: str
    compact: CompactEntity
    detail: DetailRecord | None
    statistics: dict[str, StatisticsBlock | None]

    @classmethod
    def from_payload(cls, payload: object) -> "RawSchoolRecord":
        data = _as_mapping(payload)
        compact = CompactEntity.from_payload(data.get("compactData"))
        stats_payload = _as_mapping(data.get("statistics"))
        return cls(
            code=_as_str(data.get("schoolUnitCode")) or compact.code,
            compact=compact,
            detail=DetailRecord.from_payload(data.get("details")),
            statistics={stage: StatisticsBlock.from_payload(body) for stage, body in stats_payload.items()},
        )

    def stage(self, name: str) -> StatisticsBlock | None:
        return self.statistics.get(name)
