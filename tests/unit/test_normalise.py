from _builders import details, obs, raw_record, schooling

from skolkarta.common.models import RawSchoolRecord
from skolkarta.pipeline.normalise import normalise_school


def _normalise(payload: dict) -> dict:
    return normalise_school(RawSchoolRecord.from_payload(payload))


def test_school_without_detail_gets_defaults():
    school = _normalise(raw_record("1"))

    assert school["municipality"] == "Unknown"
    assert school["ownership"] == "independent"
    assert school["address"] == {"street": "", "postalCode": "", "city": ""}
    assert school["schoolTypes"] == []
    assert school["grades"] == []
    assert school["category"] == "other"
    assert school["statistics"]["meritValue"] is None
    assert school["statistics"]["meritHistory"] == []
    assert school["statistics"]["gymnasium"] is None


def test_full_record_fields():
    payload = raw_record(
        "2",
        name="Solskolan",
        details=details(
            "2",
            schooling=[
                schooling("gr", ["9", "0", "1", "10", "X"], "Grundskola"),
                schooling("fsk", ["0"], "Förskoleklass"),
            ],
        ),
        gr={
            "averageGradesMeritRating9thGrade": [obs("231,5", "2023"), obs("228,0", "2022")],
            "ratioOfPupilsIn6thGradeWithAllSubjectsPassed": [obs("91,3", "2023")],
            "averageResultNationalTestsSubjectENG6thGrade": [obs("15,7", "2023")],
            "studentsPerTeacherQuota": [obs("11,9", "2023")],
        },
    )

    school = _normalise(payload)

    assert school["id"] == "2"
    assert school["coordinates"] == [59.3293, 18.0686]
    assert school["municipality"] == "Stockholm"
    assert school["ownership"] == "municipal"
    assert school["category"] == "F-9"
    assert school["schoolTypes"] == ["Grundskola", "Förskoleklass"]
    assert school["grades"] == ["0", "1", "9", "10", "X"]
    assert school["address"] == {"street": "Skolgatan 1", "postalCode": "111 22", "city": "Stockholm"}
    stats = school["statistics"]
    assert stats["meritValue"] == 231.5
    assert stats["meritHistory"] == [{"year": "2023", "value": 231.5}, {"year": "2022", "value": 228.0}]
    assert stats["passRateGrade6"] == 91.3
    assert stats["avgTestEnglish6"] == 15.7
    assert stats["avgTestSwedish6"] is None
    assert stats["studentsPerTeacher"] == 11.9


def test_private_organizer_is_independent():
    school = _normalise(raw_record("3", details=details("3", organizer="Enskild")))
    assert school["ownership"] == "independent"


def test_gymnasium_record_carries_program_aggregates():
    gy = {
        "programMetrics": [
            {"programCode": "NA", "ratioOfStudentsEligibleForUndergraduateEducation": [obs("95,0", "2023")]},
            {"programCode": "EK", "ratioOfStudentsEligibleForUndergraduateEducation": [obs("85,0", "2023")]},
        ],
        "totalNumberOfPupils": [obs("640", "2023")],
    }

    school = _normalise(raw_record("4", gy=gy))

    assert school["category"] == "gymnasium"
    assert school["statistics"]["gymnasium"]["eligibilityRate"] == 90.0
    assert school["statistics"]["totalPupils"] == 640.0
