from fastapi import APIRouter, Depends

from database.executor import QueryExecutor
from dependencies.database import get_executor
from schemas.common import ERROR_RESPONSES
from schemas.reports import PopularCoursesParams
from services.reports import run_report

router = APIRouter(prefix="/api/courses", tags=["과목"], responses=ERROR_RESPONSES)


# ✅ [HAVING] 수강 인원이 minEnrollments 이상인 과목
# - 숫자가 아닌 값("lots")은 쿼리 에러(500)로 처리하지 않고 NULL 로 바인딩
#   → HAVING COUNT >= NULL 은 항상 거짓이므로 200 + 빈 목록
@router.get("/popular/{minEnrollments}")
def get_popular_courses(minEnrollments: str, executor: QueryExecutor = Depends(get_executor)):
    params = PopularCoursesParams(minEnrollments=minEnrollments)
    return run_report(executor, "popular_courses", min_enrollments=params.minEnrollments)
