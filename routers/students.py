from typing import Optional

from fastapi import APIRouter, Depends, Query

from database.executor import QueryExecutor
from dependencies.database import get_executor
from schemas.common import ERROR_RESPONSES, ErrorResponse
from schemas.reports import CourseIdsFilter
from services.reports import run_report

router = APIRouter(prefix="/api/students", tags=["학생"], responses=ERROR_RESPONSES)


# ==========================================================
# [1단계] 정적 라우터
# ==========================================================

# ✅ [LEFT JOIN] 전체 학생 + 수강 요약 (수강 기록 없는 학생 포함)
@router.get("/all-with-enrollments")
def get_all_students_with_enrollments(executor: QueryExecutor = Depends(get_executor)):
    return run_report(executor, "all_students_with_enrollments")


# ✅ [SUBQUERY] 지정 과목(들)을 수강한 학생 목록
# - courseIds 누락/빈 값 → 400 (쿼리 실행 안 함)
@router.get("/in-courses", responses={400: {"model": ErrorResponse}})
def get_students_in_courses(
    courseIds: Optional[str] = Query(None, description="콤마로 구분된 과목 ID (예: 1,2,3)"),
    executor: QueryExecutor = Depends(get_executor),
):
    return run_report(executor, "students_in_courses", filters=CourseIdsFilter(courseIds=courseIds))


# ==========================================================
# [2단계] 동적 라우터
# ==========================================================

# ✅ [WHERE] 학년별 학생 목록 (값은 검증 없이 그대로 바인딩)
@router.get("/grade/{grade}")
def get_students_by_grade(grade: str, executor: QueryExecutor = Depends(get_executor)):
    return run_report(executor, "students_by_grade", grade=grade)


# ✅ [INNER JOIN] 특정 학생의 수강 내역 (최근 수강일 순)
@router.get("/{studentId}/enrollments")
def get_student_enrollments(studentId: str, executor: QueryExecutor = Depends(get_executor)):
    return run_report(executor, "student_enrollments", student_id=studentId)
