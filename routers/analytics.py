from typing import Optional

from fastapi import APIRouter, Depends, Query

from database.executor import QueryExecutor
from dependencies.database import get_executor
from schemas.common import ERROR_RESPONSES, ErrorResponse
from schemas.reports import PerformanceFilters, TopPerformerCriteria
from services.reports import run_report

router = APIRouter(prefix="/api/analytics", tags=["분석"], responses=ERROR_RESPONSES)


# ==========================================================
# [1단계] 파라미터 없는 집계
# ==========================================================

# ✅ [GROUP BY] 학년별 학생 수
@router.get("/students-per-grade")
def get_students_per_grade(executor: QueryExecutor = Depends(get_executor)):
    return run_report(executor, "students_per_grade")


# ✅ [학과 통계] 학과별 과목/학생/수강/평점/합격률 (수강 0건 학과 제외)
@router.get("/departments")
def get_department_analytics(executor: QueryExecutor = Depends(get_executor)):
    return run_report(executor, "department_analytics")


# ==========================================================
# [2단계] 쿼리 파라미터 필터
# ==========================================================

# ✅ [복합 JOIN] 학생별 성적 요약
# - grade 지정 시에만 학년 조건 추가
@router.get("/student-performance")
def get_student_performance(
    minGPA: Optional[str] = Query(None, description="최소 평점 (기본 0)"),
    grade: Optional[str] = Query(None, description="학년 (생략 시 전체)"),
    executor: QueryExecutor = Depends(get_executor),
):
    filters = PerformanceFilters(minGPA=minGPA, grade=grade)
    return run_report(executor, "student_performance", filters=filters)


# ✅ [가중 평점] 우수 학생 상위 20명
@router.get("/top-performers")
def get_top_performers(
    minCourses: Optional[str] = Query(None, description="최소 수강 과목 수 (기본 3)"),
    minGPA: Optional[str] = Query(None, description="최소 가중 평점 (기본 3.5)"),
    executor: QueryExecutor = Depends(get_executor),
):
    criteria = TopPerformerCriteria(minCourses=minCourses, minGPA=minGPA)
    return run_report(executor, "top_performers", criteria=criteria)


# ==========================================================
# [3단계] 단건 상세
# ==========================================================

# ✅ [CASE/서브쿼리] 과목 상세 분석 (없는 과목 → 404)
@router.get("/course-details/{courseId}", responses={404: {"model": ErrorResponse}})
def get_course_details(courseId: str, executor: QueryExecutor = Depends(get_executor)):
    return run_report(executor, "course_details", course_id=courseId)
