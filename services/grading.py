"""
services/grading.py

학점(letter grade) → 평점(grade point) 환산 정책을 한 곳에 모아 둔 모듈
- 모든 리포트 SQL 의 CASE 식은 grade_points_sql() 로 만들어집니다.
- unmapped="exclude": A~F 를 열거하고 ELSE 없음 → NULL(수강 중) 은 AVG 에서 제외, F=0.0
- unmapped="zero":    A~D 만 열거하고 그 외 문자(F 포함)는 0.0, NULL 은 여전히 제외
  (인기 과목 리포트가 사용하는 정책)
"""

from typing import Optional, Sequence

GRADE_POINTS = {"A": 4.0, "B": 3.0, "C": 2.0, "D": 1.0, "F": 0.0}
PASSING_GRADES = ("A", "B", "C")

# (기준 평점, 등급) - 위에서부터 처음 만족하는 등급 사용
PERFORMANCE_TIERS = (
    (3.8, "Outstanding"),
    (3.5, "Excellent"),
    (3.0, "Good"),
)
DEFAULT_TIER = "Satisfactory"


def grade_points_sql(column: str = "e.grade", *, weight: Optional[str] = None, unmapped: str = "exclude") -> str:
    if unmapped not in ("exclude", "zero"):
        raise ValueError(f"unknown grade policy: {unmapped}")

    letters = [g for g in GRADE_POINTS if unmapped == "exclude" or g != "F"]
    lines = ["CASE"]
    if unmapped == "zero":
        lines.append(f"  WHEN {column} IS NULL THEN NULL")
    for letter in letters:
        points = f"{GRADE_POINTS[letter]:.1f}"
        value = f"{points} * {weight}" if weight else points
        lines.append(f"  WHEN {column} = '{letter}' THEN {value}")
    if unmapped == "zero":
        lines.append("  ELSE 0.0")
    lines.append("END")
    return "\n".join(lines)


def grade_count_sql(letters: Sequence[str], column: str = "e.grade") -> str:
    for letter in letters:
        if letter not in GRADE_POINTS:
            raise ValueError(f"unknown letter grade: {letter}")
    if len(letters) == 1:
        cond = f"{column} = '{letters[0]}'"
    else:
        cond = f"{column} IN ({', '.join(repr(l) for l in letters)})"
    return f"SUM(CASE WHEN {cond} THEN 1 ELSE 0 END)"


def performance_rating(avg_gpa: Optional[float]) -> str:
    if avg_gpa is None:
        return DEFAULT_TIER
    for threshold, tier in PERFORMANCE_TIERS:
        if avg_gpa >= threshold:
            return tier
    return DEFAULT_TIER
