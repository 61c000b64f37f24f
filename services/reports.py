"""
services/reports.py

읽기 전용 리포트 10종을 선언형 테이블(REPORTS)로 정의하고,
공통 실행 함수 run_report() 로 "쿼리 조립 → 실행 → 행 정규화 → 후처리 → 응답 래핑" 을 처리합니다.

- 라우터는 요청 값을 파싱해 run_report(executor, "<리포트명>", ...) 만 호출
- 평점 환산 CASE 식은 services/grading.py 정책 함수로만 생성
- 선택 조건/바인딩 순서는 services/query_composer.compose() 가 보장
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from schemas.common import make_envelope
from schemas.reports import CourseIdsFilter
from services.errors import ReportError
from services.grading import (
    PASSING_GRADES,
    grade_count_sql,
    grade_points_sql,
    performance_rating,
)
from services.query_composer import ComposedQuery, compose, optional

logger = logging.getLogger(__name__)

TOP_PERFORMERS_LIMIT = 20
MISSING_COURSE_IDS = "Please provide courseIds as comma-separated values"

_GPA = grade_points_sql("e.grade")
_GPA_ZERO_ELSE = grade_points_sql("e.grade", unmapped="zero")
_WEIGHTED_POINTS = grade_points_sql("e.grade", weight="c.credits")
_WEIGHTED_GPA = f"ROUND(SUM({_WEIGHTED_POINTS}) / SUM(c.credits), 2)"
_COUNT_A, _COUNT_B, _COUNT_C, _COUNT_D, _COUNT_F = (grade_count_sql([g]) for g in "ABCDF")
_COUNT_PASSING = grade_count_sql(PASSING_GRADES)


# ==========================================================
# [1] SQL 템플릿
# ==========================================================

STUDENTS_BY_GRADE_SQL = """
SELECT
  student_id,
  first_name,
  last_name,
  email,
  grade,
  enrollment_date
FROM students
WHERE grade = :grade
ORDER BY last_name, first_name
"""

# INNER JOIN: 수강 기록이 있는 과목만
STUDENT_ENROLLMENTS_SQL = """
SELECT
  s.student_id,
  s.first_name,
  s.last_name,
  c.course_id,
  c.course_name,
  c.credits,
  e.enrollment_date,
  e.grade
FROM students s
INNER JOIN enrollments e ON s.student_id = e.student_id
INNER JOIN courses c ON e.course_id = c.course_id
WHERE s.student_id = :student_id
ORDER BY e.enrollment_date DESC
"""

# LEFT JOIN: 수강 기록이 없는 학생도 한 행씩
ALL_STUDENTS_WITH_ENROLLMENTS_SQL = """
SELECT
  s.student_id,
  s.first_name,
  s.last_name,
  s.grade,
  COUNT(e.enrollment_id) AS total_enrollments,
  GROUP_CONCAT(c.course_name SEPARATOR ', ') AS courses
FROM students s
LEFT JOIN enrollments e ON s.student_id = e.student_id
LEFT JOIN courses c ON e.course_id = c.course_id
GROUP BY s.student_id, s.first_name, s.last_name, s.grade
ORDER BY s.last_name
"""

STUDENTS_PER_GRADE_SQL = """
SELECT
  grade,
  COUNT(*) AS student_count,
  COUNT(DISTINCT email) AS unique_emails
FROM students
GROUP BY grade
ORDER BY grade
"""

POPULAR_COURSES_SQL = f"""
SELECT
  c.course_id,
  c.course_name,
  c.credits,
  COUNT(e.enrollment_id) AS enrollment_count,
  AVG({_GPA_ZERO_ELSE}) AS average_gpa
FROM courses c
INNER JOIN enrollments e ON c.course_id = e.course_id
GROUP BY c.course_id, c.course_name, c.credits
HAVING COUNT(e.enrollment_id) >= :min_enrollments
ORDER BY enrollment_count DESC, average_gpa DESC
"""

# {filters} 자리에 선택 조건(AND s.grade = :grade)이 들어감
STUDENT_PERFORMANCE_SQL = f"""
SELECT
  s.student_id,
  s.first_name,
  s.last_name,
  s.grade AS student_grade,
  COUNT(e.enrollment_id) AS courses_taken,
  SUM(c.credits) AS total_credits,
  AVG({_GPA}) AS gpa,
  GROUP_CONCAT(
    CONCAT(c.course_name, ' (', e.grade, ')')
    ORDER BY e.enrollment_date DESC
    SEPARATOR ' | '
  ) AS course_history
FROM students s
INNER JOIN enrollments e ON s.student_id = e.student_id
INNER JOIN courses c ON e.course_id = c.course_id
WHERE 1=1
{{filters}}
GROUP BY s.student_id, s.first_name, s.last_name, s.grade
HAVING AVG({_GPA}) >= :min_gpa
ORDER BY gpa DESC, total_credits DESC
"""

# 같은 과목 목록을 두 번 바인딩 (매칭 개수 서브쿼리 / 포함 여부 필터)
STUDENTS_IN_COURSES_SQL = """
SELECT DISTINCT
  s.student_id,
  s.first_name,
  s.last_name,
  s.email,
  s.grade,
  (
    SELECT COUNT(*)
    FROM enrollments e2
    WHERE e2.student_id = s.student_id
      AND e2.course_id IN :count_course_ids
  ) AS matching_course_count
FROM students s
WHERE s.student_id IN (
  SELECT DISTINCT student_id
  FROM enrollments
  WHERE course_id IN :course_ids
)
ORDER BY matching_course_count DESC, s.last_name
"""

COURSE_DETAILS_SQL = f"""
SELECT
  c.course_id,
  c.course_name,
  c.credits,
  c.department,
  COUNT(DISTINCT e.student_id) AS total_students,
  COUNT(DISTINCT s.grade) AS grade_levels_represented,
  {_COUNT_A} AS count_A,
  {_COUNT_B} AS count_B,
  {_COUNT_C} AS count_C,
  {_COUNT_D} AS count_D,
  {_COUNT_F} AS count_F,
  ROUND({_COUNT_A} * 100.0 / COUNT(*), 2) AS percent_A,
  ROUND({_COUNT_B} * 100.0 / COUNT(*), 2) AS percent_B,
  ROUND(AVG({_GPA}), 2) AS average_gpa,
  MAX(e.enrollment_date) AS latest_enrollment,
  (
    SELECT CONCAT(s2.first_name, ' ', s2.last_name)
    FROM students s2
    INNER JOIN enrollments e2 ON s2.student_id = e2.student_id
    WHERE e2.course_id = c.course_id
      AND e2.grade = 'A'
    LIMIT 1
  ) AS top_student_example
FROM courses c
LEFT JOIN enrollments e ON c.course_id = e.course_id
LEFT JOIN students s ON e.student_id = s.student_id
WHERE c.course_id = :course_id
GROUP BY c.course_id, c.course_name, c.credits, c.department
"""

# performance_rating 은 unweighted_gpa 로부터 후처리에서 계산
TOP_PERFORMERS_SQL = f"""
SELECT
  s.student_id,
  s.first_name,
  s.last_name,
  s.email,
  s.grade AS student_grade,
  COUNT(DISTINCT e.course_id) AS courses_completed,
  SUM(c.credits) AS total_credits_earned,
  {_WEIGHTED_GPA} AS weighted_gpa,
  {_COUNT_A} AS a_count,
  AVG({_GPA}) AS unweighted_gpa
FROM students s
INNER JOIN enrollments e ON s.student_id = e.student_id
INNER JOIN courses c ON e.course_id = c.course_id
GROUP BY s.student_id, s.first_name, s.last_name, s.email, s.grade
HAVING
  COUNT(DISTINCT e.course_id) >= :min_courses
  AND {_WEIGHTED_GPA} >= :min_gpa
ORDER BY weighted_gpa DESC, courses_completed DESC
LIMIT {TOP_PERFORMERS_LIMIT}
"""

DEPARTMENT_ANALYTICS_SQL = f"""
SELECT
  c.department,
  COUNT(DISTINCT c.course_id) AS total_courses,
  COUNT(DISTINCT e.student_id) AS total_students,
  SUM(c.credits) AS total_credits_offered,
  AVG(c.credits) AS avg_credits_per_course,
  COUNT(e.enrollment_id) AS total_enrollments,
  ROUND(COUNT(e.enrollment_id) * 1.0 / COUNT(DISTINCT c.course_id), 2) AS avg_enrollments_per_course,
  ROUND(AVG({_GPA}), 2) AS department_avg_gpa,
  CONCAT(
    'A:', {_COUNT_A}, ' ',
    'B:', {_COUNT_B}, ' ',
    'C:', {_COUNT_C}
  ) AS grade_distribution,
  ROUND(
    {_COUNT_PASSING} * 100.0 / COUNT(e.enrollment_id),
    2
  ) AS success_rate_percent
FROM courses c
LEFT JOIN enrollments e ON c.course_id = e.course_id
GROUP BY c.department
HAVING COUNT(e.enrollment_id) > 0
ORDER BY total_enrollments DESC, department_avg_gpa DESC
"""


# ==========================================================
# [2] 행 정규화 / 후처리
# ==========================================================

def normalize_value(value: Any) -> Any:
    # MySQL 집계값(Decimal) → 정수는 int, 나머지는 float
    if isinstance(value, Decimal):
        if value == value.to_integral_value() and value.as_tuple().exponent >= 0:
            return int(value)
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return value


def normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {key: normalize_value(value) for key, value in row.items()}


def _empty_courses(row: dict) -> dict:
    if row.get("courses") is None:
        row["courses"] = ""
    return row


def _rate_performance(row: dict) -> dict:
    row["performance_rating"] = performance_rating(row.pop("unweighted_gpa", None))
    return row


# ==========================================================
# [3] 리포트 선언 테이블
# ==========================================================

@dataclass(frozen=True)
class Report:
    name: str
    label: str                                  # 로그용 ("Error fetching <label>")
    build: Callable[..., ComposedQuery]
    error_message: str
    describe: Callable[..., str]                # 실행 전 로그
    outcome: Callable[..., str]                 # 실행 후 로그 (count 포함)
    postprocess: Optional[Callable[[dict], dict]] = None
    validate: Optional[Callable[..., None]] = None
    single: bool = False
    not_found_message: Optional[str] = None
    with_count: bool = True
    echo_key: Optional[str] = None              # "filters" | "criteria"
    echo: Optional[Callable[..., dict]] = None


def _require_course_ids(filters: CourseIdsFilter) -> None:
    if not filters.courseIds:
        raise ReportError(400, MISSING_COURSE_IDS)


REPORTS: Dict[str, Report] = {
    r.name: r
    for r in [
        Report(
            name="students_by_grade",
            label="students by grade",
            build=lambda grade: compose(STUDENTS_BY_GRADE_SQL, grade=grade),
            error_message="Failed to fetch students",
            describe=lambda grade: f"Fetching students from grade: {grade}",
            outcome=lambda count, grade: f"Found {count} students in grade {grade}",
        ),
        Report(
            name="student_enrollments",
            label="student enrollments",
            build=lambda student_id: compose(STUDENT_ENROLLMENTS_SQL, student_id=student_id),
            error_message="Failed to fetch enrollments",
            describe=lambda student_id: f"Fetching enrollments for student ID: {student_id}",
            outcome=lambda count, student_id: f"Found {count} enrollments for student {student_id}",
        ),
        Report(
            name="all_students_with_enrollments",
            label="students with enrollments",
            build=lambda: compose(ALL_STUDENTS_WITH_ENROLLMENTS_SQL),
            error_message="Failed to fetch data",
            describe=lambda: "Fetching all students with enrollment data",
            outcome=lambda count: f"Found {count} students with enrollment data",
            postprocess=_empty_courses,
        ),
        Report(
            name="students_per_grade",
            label="students per grade",
            build=lambda: compose(STUDENTS_PER_GRADE_SQL),
            error_message="Failed to calculate analytics",
            describe=lambda: "Calculating students per grade",
            outcome=lambda count: f"Calculated distribution across {count} grades",
            with_count=False,
        ),
        Report(
            name="popular_courses",
            label="popular courses",
            build=lambda min_enrollments: compose(POPULAR_COURSES_SQL, min_enrollments=min_enrollments),
            error_message="Failed to fetch popular courses",
            describe=lambda min_enrollments: f"Fetching courses with at least {min_enrollments} enrollments",
            outcome=lambda count, min_enrollments: f"Found {count} popular courses",
        ),
        Report(
            name="student_performance",
            label="student performance",
            build=lambda filters: compose(
                STUDENT_PERFORMANCE_SQL,
                predicates=[optional("AND s.grade = :grade", "grade", filters.grade)],
                min_gpa=filters.minGPA,
            ),
            error_message="Failed to fetch performance data",
            describe=lambda filters: (
                f"Fetching student performance data (minGPA: {filters.minGPA}, grade: {filters.grade or 'all'})"
            ),
            outcome=lambda count, filters: f"Found {count} students meeting performance criteria",
            echo_key="filters",
            echo=lambda filters: filters.echo(),
        ),
        Report(
            name="students_in_courses",
            label="students in courses",
            build=lambda filters: compose(
                STUDENTS_IN_COURSES_SQL,
                expanding=["count_course_ids", "course_ids"],
                count_course_ids=list(filters.courseIds),
                course_ids=list(filters.courseIds),
            ),
            error_message="Failed to fetch students",
            validate=_require_course_ids,
            describe=lambda filters: f"Fetching students in courses: {', '.join(filters.courseIds)}",
            outcome=lambda count, filters: f"Found {count} students enrolled in specified courses",
            echo_key="filters",
            echo=lambda filters: filters.echo(),
        ),
        Report(
            name="course_details",
            label="course analytics",
            build=lambda course_id: compose(COURSE_DETAILS_SQL, course_id=course_id),
            error_message="Failed to fetch course analytics",
            describe=lambda course_id: f"Fetching comprehensive analytics for course: {course_id}",
            outcome=lambda count, course_id: f"Successfully fetched analytics for course {course_id}",
            single=True,
            not_found_message="Course not found",
        ),
        Report(
            name="top_performers",
            label="top performers",
            build=lambda criteria: compose(
                TOP_PERFORMERS_SQL,
                min_courses=criteria.minCourses,
                min_gpa=criteria.minGPA,
            ),
            error_message="Failed to fetch top performers",
            describe=lambda criteria: (
                f"Fetching top performers (minCourses: {criteria.minCourses}, minGPA: {criteria.minGPA})"
            ),
            outcome=lambda count, criteria: f"Found {count} top-performing students",
            postprocess=_rate_performance,
            echo_key="criteria",
            echo=lambda criteria: criteria.echo(),
        ),
        Report(
            name="department_analytics",
            label="department analytics",
            build=lambda: compose(DEPARTMENT_ANALYTICS_SQL),
            error_message="Failed to fetch department analytics",
            describe=lambda: "Fetching department analytics",
            outcome=lambda count: f"Fetched analytics for {count} departments",
        ),
    ]
}


# ==========================================================
# [4] 공통 실행
# ==========================================================

def run_report(executor, name: str, **inputs: Any) -> dict:
    report = REPORTS[name]

    # 필수 입력 검증 → 실패 시 쿼리 실행 없이 400
    if report.validate:
        report.validate(**inputs)

    logger.info(report.describe(**inputs))
    query = report.build(**inputs)

    try:
        rows: List[Dict[str, Any]] = executor.fetch_all(query)
    except Exception as exc:
        # 원본 에러는 로그에만, 응답은 고정 메시지
        logger.exception(f"Error fetching {report.label}")
        raise ReportError(500, report.error_message) from exc

    rows = [normalize_row(row) for row in rows]
    if report.postprocess:
        rows = [report.postprocess(row) for row in rows]

    if report.single:
        if not rows:
            logger.warning(f"{report.not_found_message}: {', '.join(str(v) for v in inputs.values())}")
            raise ReportError(404, report.not_found_message)
        logger.info(report.outcome(1, **inputs))
        return make_envelope(rows[0], with_count=False)

    logger.info(report.outcome(len(rows), **inputs))
    echo = report.echo(**inputs) if report.echo else None
    return make_envelope(rows, with_count=report.with_count, echo_key=report.echo_key, echo=echo)

