from _builders import details, obs, raw_record, schooling

from skolkarta.common.models import RawSchoolRecord
from skolkarta.pipeline.classify import determine_category


def _classify(**kwargs) -> str:
    return determine_category(RawSchoolRecord.from_payload(raw_record("100", **kwargs)))


GRADE9 = {"averageGradesMeritRating9thGrade": [obs("231,4", "2023")]}
GRADE6 = {"ratioOfPupilsIn6thGradeWithAllSubjectsPassed": [obs("88,0", "2023")]}


def test_grade9_and_grade6_statistics_give_f9_despite_name():
    assert _classify(name="Högstadieskolan 7-9", gr={**GRADE9, **GRADE6}) == "F-9"


def test_grade9_only_and_grade6_only():
    assert _classify(gr=GRADE9) == "7-9"
    assert _classify(gr=GRADE6) == "F-6"
    assert _classify(gr={"averageResultNationalTestsSubjectMA6thGrade": [obs("11,2", "2023")]}) == "F-6"


def test_suppressed_observations_do_not_count_as_grade_data():
    gr = {"averageGradesMeritRating9thGrade": [obs(".", "2023", "NOT_PUBLISHED")]}
    assert _classify(gr=gr, details=details("100", schooling=[schooling("gr", ["1", "2", "3"])])) == "F-6"


def test_gymnasium_code_beats_grade_statistics():
    detail = details("100", schooling=[schooling("gy", []), schooling("gr", ["7", "8", "9"])])
    assert _classify(details=detail, gr={**GRADE9, **GRADE6}) == "gymnasium"


def test_gymnasium_from_program_statistics_or_name():
    gy = {"programMetrics": [{"programCode": "NA", "gradesPointsForStudents": [obs("14,9", "2023")]}]}
    assert _classify(gy=gy) == "gymnasium"
    assert _classify(name="Norra Real Gymnasium") == "gymnasium"
    assert _classify(name="Gymnasieskolan Väst") == "gymnasium"


def test_empty_program_entries_are_not_a_gymnasium_signal():
    gy = {"programMetrics": [{"programCode": "NA"}]}
    assert _classify(gy=gy, gr=GRADE9) == "7-9"


def test_special_needs_by_code_or_name():
    assert _classify(details=details("100", schooling=[schooling("gran", ["1", "2"])]), gr=GRADE9) == "anpassad"
    assert _classify(name="Anpassad grundskola Syd") == "anpassad"


def test_school_years_used_when_statistics_are_silent():
    assert _classify(details=details("100", schooling=[schooling("gr", ["0", "1", "2", "9"])])) == "F-9"
    assert _classify(details=details("100", schooling=[schooling("gr", ["7", "8", "9"])])) == "7-9"
    assert _classify(details=details("100", schooling=[schooling("gr", ["4", "5", "6"])])) == "F-6"


def test_name_fallback():
    assert _classify(name="Solskolan F-9") == "F-9"
    assert _classify(name="Solskolan F–6") == "F-6"
    assert _classify(name="Solskolan F-3") == "F-6"
    assert _classify(name="Solskolan 7-9") == "7-9"
    assert _classify(name="Högstadium Öst") == "7-9"


def test_any_primary_statistics_default_to_f6_else_other():
    assert _classify(gr={"totalNumberOfPupils": [obs("120", "2023")]}) == "F-6"
    assert _classify() == "other"
    assert _classify(gr={}) == "other"
