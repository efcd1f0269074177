"""Application constants."""

USER_AGENT = "skolkarta/1.0 (+school snapshot pipeline)"
ACCEPT_HEADER = "application/vnd.skolverket.plannededucations.api.v3.hal+json"
STAGES = (
    "fetch",
    "process",
)
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "event",
    "status",
    "attempt",
    "entity",
    "page",
    "processed",
    "total",
    "error_code",
    "message",
)

VALUE_EXISTS = "EXISTS"
VISITING_ADDRESS = "VISITING_ADDRESS"
MUNICIPAL_ORGANIZER = "Kommunal"
UNKNOWN_MUNICIPALITY = "Unknown"

STAGE_PRIMARY = "gr"
STAGE_SECONDARY = "gy"
SCHOOLING_SPECIAL_NEEDS = "gran"
SCHOOLING_PRIMARY = "gr"
SCHOOLING_UPPER_SECONDARY = "gy"

# Grundskola statistics (stage "gr").
METRIC_MERIT_9 = "averageGradesMeritRating9thGrade"
METRIC_PASS_RATE_9 = "ratioOfPupilsIn9thGradeWithAllSubjectsPassed"
METRIC_PASS_RATE_6 = "ratioOfPupilsIn6thGradeWithAllSubjectsPassed"
METRIC_TEST_SWEDISH_6 = "averageResultNationalTestsSubjectSVE6thGrade"
METRIC_TEST_ENGLISH_6 = "averageResultNationalTestsSubjectENG6thGrade"
METRIC_TEST_MATH_6 = "averageResultNationalTestsSubjectMA6thGrade"
GRADE_6_TEST_METRICS = (METRIC_TEST_SWEDISH_6, METRIC_TEST_ENGLISH_6, METRIC_TEST_MATH_6)

# Shared by both stages.
METRIC_STUDENTS_PER_TEACHER = "studentsPerTeacherQuota"
METRIC_CERTIFIED_TEACHERS = "certifiedTeachersQuota"
METRIC_TOTAL_PUPILS = "totalNumberOfPupils"

# Gymnasium program metrics (stage "gy", under programMetrics).
METRIC_ELIGIBILITY = "ratioOfStudentsEligibleForUndergraduateEducation"
METRIC_GRADE_POINTS = "gradesPointsForStudents"
METRIC_GRADUATION = "ratioOfStudentsWithDiplomaWithin3Years"
METRIC_ADMISSION_AVG = "admissionPointsAverage"
METRIC_ADMISSION_MIN = "admissionPointsMin"
