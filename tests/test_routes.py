import asyncio
import logging

from fastapi.testclient import TestClient

from main import ENDPOINTS, create_app, wait_for_database
from fakes import FakeExecutor


# ==========================================================
# [메타] 헬스체크 / 루트
# ==========================================================

def test_health_ok(client):
    res = client.get("/health")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["timestamp"].endswith("Z")
    assert "X-Latency-Ms" in res.headers


def test_health_unavailable(client, executor):
    executor.ping_error = ConnectionError("Can't connect to MySQL server")

    res = client.get("/health")

    assert res.status_code == 503
    assert res.json()["status"] == "unhealthy"
    assert res.json()["database"] == "disconnected"


def test_root_lists_endpoints(client):
    res = client.get("/")

    assert res.status_code == 200
    assert res.json()["endpoints"] == ENDPOINTS
    assert res.json()["version"] == "1.0.0"


# ==========================================================
# [리포트] 경로별 바인딩 / 응답 형식
# ==========================================================

def test_students_by_grade(client, executor):
    executor.rows = [{"student_id": 5, "first_name": "David", "grade": 10}]

    res = client.get("/api/students/grade/10")

    assert res.status_code == 200
    assert res.json() == {"success": True, "count": 1, "data": executor.rows}
    assert executor.queries[0].params == {"grade": "10"}


def test_injection_payload_is_bound_data(client, executor):
    res = client.get("/api/students/grade/10; DROP TABLE students")

    assert res.status_code == 200
    query = executor.queries[0]
    assert query.params == {"grade": "10; DROP TABLE students"}
    assert "DROP" not in query.sql


def test_student_enrollments_route_is_not_shadowed(client, executor):
    client.get("/api/students/all-with-enrollments")
    client.get("/api/students/7/enrollments")

    assert executor.queries[0].params == {}
    assert executor.queries[1].params == {"student_id": "7"}


def test_students_per_grade_has_no_count(client, executor):
    executor.rows = [{"grade": 9, "student_count": 4, "unique_emails": 4}]

    body = client.get("/api/analytics/students-per-grade").json()

    assert body == {"success": True, "data": executor.rows}


def test_popular_courses_threshold(client, executor):
    client.get("/api/courses/popular/3")
    client.get("/api/courses/popular/lots")

    assert executor.queries[0].params == {"min_enrollments": 3}
    assert executor.queries[1].params == {"min_enrollments": None}


def test_popular_courses_non_numeric_threshold_is_empty_not_error(client, executor):
    executor.rows = []

    res = client.get("/api/courses/popular/lots")

    assert res.status_code == 200
    assert res.json() == {"success": True, "count": 0, "data": []}


def test_student_performance_param_order(client, executor):
    res = client.get("/api/analytics/student-performance", params={"minGPA": "3.0", "grade": "10"})

    assert res.status_code == 200
    assert res.json()["filters"] == {"minGPA": 3.0, "grade": "10"}
    assert executor.queries[0].param_order == ("grade", "min_gpa")

    client.get("/api/analytics/student-performance")
    assert executor.queries[1].param_order == ("min_gpa",)


def test_students_in_courses_missing_ids(client, executor):
    for url in ("/api/students/in-courses", "/api/students/in-courses?courseIds="):
        res = client.get(url)
        assert res.status_code == 400
        assert res.json() == {"success": False, "error": "Please provide courseIds as comma-separated values"}

    assert executor.queries == []


def test_students_in_courses(client, executor):
    executor.rows = [{"student_id": 1, "matching_course_count": 1}]

    res = client.get("/api/students/in-courses?courseIds=1")

    assert res.status_code == 200
    assert res.json()["filters"] == {"courseIds": ["1"]}
    assert executor.queries[0].params["course_ids"] == ["1"]


def test_course_details_not_found(client, executor):
    res = client.get("/api/analytics/course-details/999")

    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Course not found"}
    assert "data" not in res.json()


def test_course_details_without_enrollments(client, executor):
    executor.rows = [{
        "course_id": 19,
        "total_students": 0,
        "count_A": 0,
        "percent_A": 0,
        "average_gpa": None,
        "latest_enrollment": None,
        "top_student_example": None,
    }]

    res = client.get("/api/analytics/course-details/19")

    assert res.status_code == 200
    assert res.json() == {"success": True, "data": executor.rows[0]}


def test_top_performers_criteria(client, executor):
    res = client.get("/api/analytics/top-performers?minCourses=4&minGPA=3.8")

    assert res.json()["criteria"] == {"minCourses": 4, "minGPA": 3.8}
    assert executor.queries[0].params == {"min_courses": 4, "min_gpa": 3.8}


def test_top_performers_zero_means_default(client, executor):
    res = client.get("/api/analytics/top-performers?minCourses=0&minGPA=0")

    assert res.json()["criteria"] == {"minCourses": 3, "minGPA": 3.5}
    assert executor.queries[0].params == {"min_courses": 3, "min_gpa": 3.5}


def test_overflowing_min_gpa_uses_default(client, executor):
    res = client.get("/api/analytics/student-performance?minGPA=1e999")

    assert res.status_code == 200
    assert res.json()["filters"] == {"minGPA": 0.0, "grade": "all"}
    assert executor.queries[0].params == {"min_gpa": 0.0}

    client.get("/api/analytics/top-performers?minGPA=1e999")
    assert executor.queries[1].params["min_gpa"] == 3.5


def test_execution_failure_returns_generic_500(executor):
    executor.error = RuntimeError("Table 'school_db.students' doesn't exist")
    client = TestClient(create_app(executor=executor))

    res = client.get("/api/analytics/departments")

    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Failed to fetch department analytics"}


def test_unhandled_error_still_logs_access_line(executor, caplog):
    # JSON 으로 직렬화할 수 없는 값 → 라우트 밖으로 예외 전파
    executor.rows = [{"student_id": 1, "gpa": float("nan")}]
    client = TestClient(create_app(executor=executor), raise_server_exceptions=False)

    with caplog.at_level(logging.INFO, logger="access"):
        res = client.get("/api/students/grade/10")

    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Internal server error"}
    assert '"GET /api/students/grade/10" 500' in caplog.text


# ==========================================================
# [기동] DB 연결 재시도
# ==========================================================

class FlakyExecutor(FakeExecutor):
    def __init__(self, failures):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def ping(self):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ConnectionError("database not ready")


def test_wait_for_database_retries_until_connected():
    executor = FlakyExecutor(failures=2)

    asyncio.run(wait_for_database(executor, 0))

    assert executor.attempts == 3


def test_startup_and_shutdown_hooks():
    executor = FlakyExecutor(failures=0)

    with TestClient(create_app(executor=executor)) as client:
        assert client.get("/health").status_code == 200

    assert executor.disposed
