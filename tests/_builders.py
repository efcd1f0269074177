"""Payload builders shared by the test suite."""

from __future__ import annotations

from skolkarta.common.http import NotFoundError


def obs(value: str, period: str, value_type: str = "EXISTS") -> dict:
    return {"value": value, "valueType": value_type, "timePeriod": period}


def compact(code: str, name: str = "Testskolan", lat: str = "59.3293", lng: str = "18.0686", abroad: bool = False) -> dict:
    return {
        "schoolUnitCode": code,
        "schoolUnitName": name,
        "wgs84Latitude": lat,
        "wgs84Longitude": lng,
        "abroadSchool": abroad,
    }


def details(
    code: str,
    *,
    organizer: str | None = "Kommunal",
    city: str | None = "Stockholm",
    schooling: list[dict] | None = None,
) -> dict:
    addresses = []
    if city is not None:
        addresses = [
            {"type": "POSTAL_ADDRESS", "street": "Box 1", "zipCode": "100 00", "city": "Postort"},
            {"type": "VISITING_ADDRESS", "street": "Skolgatan 1", "zipCode": "111 22", "city": city},
        ]
    return {
        "code": code,
        "name": "Testskolan",
        "principalOrganizerType": organizer,
        "contactInfo": {"addresses": addresses},
        "typeOfSchooling": schooling or [],
    }


def schooling(code: str, years: list[str], display_name: str | None = None) -> dict:
    return {"code": code, "displayName": display_name or code.upper(), "schoolYears": years}


def raw_record(code: str, *, name: str = "Testskolan", details=None, gr=None, gy=None) -> dict:
    return {
        "schoolUnitCode": code,
        "compactData": compact(code, name=name),
        "details": details,
        "statistics": {"gr": gr, "gy": gy},
    }


def listing_page(units: list[dict], total_pages: int) -> dict:
    return {"body": {"_embedded": {"compactSchoolUnits": units}, "page": {"totalPages": total_pages}}}


class FakeClient:
    """Stands in for ``HttpClient``; answers from a URL keyed table.

    Listing pages are keyed as ``"<url>?page=<n>"``. A value that is an
    exception instance is raised instead of returned; unknown URLs raise
    ``NotFoundError``.
    """

    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    def get_json(self, url, *, params=None, headers=None, timeout=None):
        key = url if params is None else f"{url}?page={params['page']}"
        self.calls.append(key)
        if key not in self.responses:
            raise NotFoundError(f"HTTP 404 for {key}", status_code=404)
        response = self.responses[key]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass
