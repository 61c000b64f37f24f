"""
schemas/reports.py

리포트 요청 파라미터 스키마 (Pydantic v2)
- 경로/쿼리 값은 문자열로 들어오므로 before-validator 에서 숫자로 변환합니다.
- 숫자 변환은 앞쪽 숫자 부분만 사용하는 관대한 규칙("3.5abc" → 3.5, "10; DROP ..." → 10),
  숫자로 시작하지 않으면 기본값을 사용합니다.
- filters / criteria 로 응답에 그대로 되돌려주기 위해 필드명은 API 파라미터명(camelCase)을 따릅니다.
"""

import math
import re
from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, int):
        return value
    m = _INT_PREFIX.match(str(value))
    return int(m.group(1)) if m else default


def parse_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = float(value)
    else:
        m = _FLOAT_PREFIX.match(str(value))
        if not m:
            return default
        parsed = float(m.group(1))
    # "1e999" → inf 는 JSON 으로 내보낼 수 없으므로 숫자가 아닌 것으로 취급
    return parsed if math.isfinite(parsed) else default


def split_ids(value: Optional[str]) -> List[str]:
    # "1, 2,,3" → ["1","2","3"]
    if not value:
        return []
    return [s.strip() for s in value.split(",") if s.strip()]


# ==========================================================
# [입력용 스키마]
# ==========================================================

class PopularCoursesParams(BaseModel):
    # 숫자가 아니면 None → SQL NULL 비교 → 빈 결과
    minEnrollments: Optional[int] = None

    @field_validator("minEnrollments", mode="before")
    @classmethod
    def _lenient_int(cls, v):
        return parse_int(v)


class PerformanceFilters(BaseModel):
    minGPA: float = 0.0
    grade: Optional[str] = None

    @field_validator("minGPA", mode="before")
    @classmethod
    def _lenient_float(cls, v):
        return parse_float(v, 0.0)

    @field_validator("grade", mode="before")
    @classmethod
    def _blank_is_all(cls, v):
        return v or None

    def echo(self) -> dict:
        return {"minGPA": self.minGPA, "grade": self.grade or "all"}


class CourseIdsFilter(BaseModel):
    courseIds: List[str] = []

    @field_validator("courseIds", mode="before")
    @classmethod
    def _split(cls, v):
        if isinstance(v, str) or v is None:
            return split_ids(v)
        return v

    def echo(self) -> dict:
        return {"courseIds": self.courseIds}


class TopPerformerCriteria(BaseModel):
    # 0 도 "지정 안 함"으로 보고 기본값 사용 (minCourses=0 → 3, minGPA=0 → 3.5)
    minCourses: int = 3
    minGPA: float = 3.5

    @field_validator("minCourses", mode="before")
    @classmethod
    def _lenient_int(cls, v):
        return parse_int(v, 3) or 3

    @field_validator("minGPA", mode="before")
    @classmethod
    def _lenient_float(cls, v):
        return parse_float(v, 3.5) or 3.5

    def echo(self) -> dict:
        return {"minCourses": self.minCourses, "minGPA": self.minGPA}

