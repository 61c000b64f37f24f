import asyncio
import logging
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.log_config import setup_logging
from config.settings import Settings, settings as default_settings
from database.db import build_engine
from database.executor import QueryExecutor
from dependencies.database import get_executor

# ✅ 미들웨어 임포트
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers, now_iso

# ✅ 라우터 임포트
from routers import analytics, courses, students

logger = logging.getLogger(__name__)

# ✅ 루트(/)에서 보여줄 엔드포인트 목록
ENDPOINTS = {
    "health": "GET /health",
    "simple_where": "GET /api/students/grade/:grade",
    "inner_join": "GET /api/students/:studentId/enrollments",
    "left_join": "GET /api/students/all-with-enrollments",
    "group_by": "GET /api/analytics/students-per-grade",
    "having": "GET /api/courses/popular/:minEnrollments",
    "complex_join": "GET /api/analytics/student-performance?minGPA=3.0&grade=10",
    "subquery": "GET /api/students/in-courses?courseIds=1,2,3",
    "advanced_case": "GET /api/analytics/course-details/:courseId",
    "complex_aggregation": "GET /api/analytics/top-performers?minCourses=3&minGPA=3.5",
    "department_analytics": "GET /api/analytics/departments",
}


async def wait_for_database(executor: QueryExecutor, retry_seconds: float) -> None:
    """DB 연결이 될 때까지 retry_seconds 간격으로 무한 재시도"""
    while True:
        try:
            await run_in_threadpool(executor.ping)
            logger.info("Database connection pool established successfully")
            return
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            logger.info(f"Retrying database connection in {retry_seconds}s")
            await asyncio.sleep(retry_seconds)


def create_app(executor: Optional[QueryExecutor] = None, settings: Settings = default_settings) -> FastAPI:
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
    )

    # ✅ 쿼리 실행기: 앱당 하나, 라우터에는 Depends(get_executor)로 주입
    app.state.executor = executor or QueryExecutor(build_engine(settings))

    # ✅ CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # ✅ 요청 지연 측정 + 접근 로그 미들웨어 (응답 헤더 X-Latency-Ms 추가)
    app.add_middleware(TimingMiddleware)

    # ✅ 전역 에러 핸들러 등록 ({"success": false, "error": "..."})
    add_error_handlers(app)

    # ✅ 라우터 등록 (정적 경로가 동적 경로보다 먼저 선언되어 있음)
    app.include_router(students.router)
    app.include_router(courses.router)
    app.include_router(analytics.router)

    # ✅ 기동 시 DB 연결 확인 (성공할 때까지 요청을 받지 않음)
    @app.on_event("startup")
    async def _connect_database():
        await wait_for_database(app.state.executor, settings.DB_CONNECT_RETRY_SECONDS)
        logger.info(f"Server is running on port {settings.PORT} (env: {settings.ENV})")

    @app.on_event("shutdown")
    def _close_database():
        app.state.executor.dispose()

    # ✅ 헬스체크 엔드포인트
    @app.get("/health", tags=["메타"])
    def health_check(executor: QueryExecutor = Depends(get_executor)):
        try:
            executor.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "database": "disconnected", "error": str(e)},
            )
        return {"status": "healthy", "database": "connected", "timestamp": now_iso()}

    # ✅ 루트 엔드포인트 (API 목록)
    @app.get("/", tags=["메타"])
    def root():
        return {
            "message": f"{settings.APP_TITLE} - SQL Query Examples",
            "version": settings.APP_VERSION,
            "endpoints": ENDPOINTS,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=default_settings.HOST, port=default_settings.PORT)
