import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from schemas.common import ErrorResponse
from services.errors import ReportError

logger = logging.getLogger(__name__)


def now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def add_error_handlers(app: FastAPI):
    @app.exception_handler(ReportError)
    async def report_error_handler(request: Request, exc: ReportError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        # 원본 메시지는 로그에만 남기고 응답은 고정 문구
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "Internal server error")
