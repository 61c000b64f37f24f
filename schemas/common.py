"""
schemas/common.py

- 프로젝트 전반에서 재사용할 공용 응답 스키마/헬퍼
- Pydantic v2 기준
- 포함 내용:
  1) 에러 응답 표준: ErrorResponse  → {"success": false, "error": "..."}
  2) 성공 응답 래퍼: make_envelope() → {"success": true, [filters|criteria], "count"?, "data"}
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =========================================================
# 1) 에러 응답 표준
# =========================================================

class ErrorResponse(BaseModel):
    """
    middlewares/error_handler.py 가 내려주는 표준 에러 응답
    - 라우터의 responses= 에 지정해 Swagger 문서화에 사용
    - DB 엔진의 원본 에러 메시지는 절대 담지 않음(로그에만 기록)
    """
    success: bool = False
    error: str = Field(..., description="리포트별 고정 에러 메시지 (예: Failed to fetch students)")

    model_config = ConfigDict(extra="ignore")


ERROR_RESPONSES = {
    500: {"model": ErrorResponse, "description": "쿼리 실행 실패"},
}


# =========================================================
# 2) 성공 응답 래퍼
# =========================================================

def make_envelope(
    data: Any,
    *,
    with_count: bool = True,
    echo_key: Optional[str] = None,
    echo: Optional[dict] = None,
) -> dict:
    """
    성공 응답 표준 래퍼
    - 키 순서: success → (filters|criteria) → count → data
    - data 가 단건(dict)이면 count 를 넣지 않음
    """
    body: dict = {"success": True}
    if echo_key:
        body[echo_key] = echo or {}
    if with_count and isinstance(data, list):
        body["count"] = len(data)
    body["data"] = data
    return body
