import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("access")


class TimingMiddleware(BaseHTTPMiddleware):
    """요청 지연 측정 + 접근 로그 (응답 헤더 X-Latency-Ms)"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # 처리되지 않은 예외도 500 으로 접근 로그를 남기고 그대로 전파
            self._log_access(request, 500, start)
            raise

        latency_ms = self._log_access(request, response.status_code, start)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        return response

    @staticmethod
    def _log_access(request: Request, status_code: int, start: float) -> int:
        latency_ms = int((time.perf_counter() - start) * 1000)
        client = request.client.host if request.client else "-"
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        logger.info(f'{client} "{request.method} {path}" {status_code} {latency_ms}ms')
        return latency_ms
