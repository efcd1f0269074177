import json

import pytest

from _builders import compact, details, obs, raw_record, schooling
from skolkarta.common.errors import RawDataMissingError
from skolkarta.pipeline.process import run_process


def _write(path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


def _raw_records():
    f9 = raw_record(
        "100",
        name="Solskolan",
        details=details("100", schooling=[schooling("gr", ["1", "6", "9"])]),
        gr={
            "averageGradesMeritRating9thGrade": [obs("231,5", "2023/24"), obs("220", "2022/23")],
            "ratioOfPupilsIn6thGradeWithAllSubjectsPassed": [obs("90", "2023/24")],
        },
    )
    unknown = raw_record("200", name="Ängens skola")
    gymnasium = raw_record(
        "300",
        name="Norra Real",
        details=details("300", organizer="Enskild", city="Göteborg", schooling=[schooling("gy", [])]),
        gy={
            "programMetrics": [
                {
                    "programCode": "NA",
                    "ratioOfStudentsEligibleForUndergraduateEducation": [obs("95,0", "2023/24")],
                }
            ]
        },
    )
    no_coordinates = raw_record("400")
    no_coordinates["compactData"] = compact("400", lat="", lng="")
    duplicate = raw_record("100", name="Duplicate")
    return [unknown, f9, gymnasium, no_coordinates, duplicate]


@pytest.mark.integration
def test_process_stage_builds_sorted_snapshot(tmp_path, pipeline_config):
    _write(tmp_path / "raw" / "all-school-data.json", _raw_records())
    _write(tmp_path / "raw" / "fetch-metadata.json", {"fetchedAt": "2026-03-01T08:00:00.000+00:00"})

    snapshot = run_process(pipeline_config, tmp_path, "run-test")

    schools = snapshot["schools"]
    assert [s["id"] for s in schools] == ["100", "300", "200"]

    f9, gymnasium, unknown = schools
    assert f9["category"] == "F-9"
    assert f9["statistics"]["meritValue"] == 231.5
    assert f9["statistics"]["meritHistory"] == [
        {"year": "2023/24", "value": 231.5},
        {"year": "2022/23", "value": 220.0},
    ]
    assert gymnasium["ownership"] == "independent"
    assert gymnasium["statistics"]["gymnasium"]["eligibilityRate"] == 95.0
    assert unknown["municipality"] == "Unknown"
    assert unknown["ownership"] == "independent"
    assert unknown["category"] == "other"
    assert unknown["address"] == {"street": "", "postalCode": "", "city": ""}

    metadata = snapshot["metadata"]
    assert metadata["fetchedAt"] == "2026-03-01T08:00:00.000+00:00"
    assert metadata["totalSchools"] == 3
    assert metadata["withMeritData"] == 1
    assert metadata["withGymnasiumData"] == 1

    written = json.loads((tmp_path / "out" / "schools.json").read_text(encoding="utf-8"))
    assert written == snapshot

    summary = json.loads((tmp_path / "out" / "reports" / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["run_id"] == "run-test"
    assert summary["top_by_category"]["F-9"] == {"id": "100", "name": "Solskolan", "score": 231.5}
    assert summary["ownership"] == {"independent": 2, "municipal": 1}


@pytest.mark.integration
def test_fetched_at_falls_back_to_processing_time(tmp_path, pipeline_config):
    _write(tmp_path / "raw" / "all-school-data.json", [raw_record("100")])

    metadata = run_process(pipeline_config, tmp_path, "run-test")["metadata"]

    assert metadata["fetchedAt"] == metadata["processedAt"]


@pytest.mark.integration
def test_missing_raw_snapshot(tmp_path, pipeline_config):
    with pytest.raises(RawDataMissingError, match="Run the fetch stage first"):
        run_process(pipeline_config, tmp_path, "run-test")


@pytest.mark.integration
def test_raw_snapshot_must_be_a_list(tmp_path, pipeline_config):
    _write(tmp_path / "raw" / "all-school-data.json", {"schools": []})

    with pytest.raises(RawDataMissingError):
        run_process(pipeline_config, tmp_path, "run-test")
