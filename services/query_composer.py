"""
services/query_composer.py

리포트 SQL 조립기
- 템플릿의 {filters} 자리에 선택 조건(Predicate)을 끼워 넣고,
  바인딩 파라미터를 "조건 파라미터 → 템플릿 파라미터" 순서로 정렬해 돌려줍니다.
- 사용자 입력은 절대 SQL 문자열에 들어가지 않고 항상 :name 바인딩으로만 전달됩니다.
- 조립이 끝나면 SQL 안의 플레이스홀더 집합과 파라미터 이름 집합이 일치하는지 검사합니다.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause

# :name 형태의 바인딩 (::cast, 문자열 리터럴 안의 'A:' 등은 제외)
_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")
_FILTERS_SLOT = "{filters}"


@dataclass(frozen=True)
class Predicate:
    """선택 조건 조각. value 가 None 이면 SQL 에 포함되지 않음"""
    fragment: str
    name: str
    value: Any = None

    @property
    def included(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ComposedQuery:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)
    # IN (...) 리스트로 펼쳐서 바인딩할 파라미터 이름
    expanding: Tuple[str, ...] = ()

    @property
    def param_order(self) -> Tuple[str, ...]:
        return tuple(self.params)

    def to_clause(self) -> TextClause:
        clause = text(self.sql)
        if self.expanding:
            clause = clause.bindparams(*(bindparam(name, expanding=True) for name in self.expanding))
        return clause


def placeholders(sql: str) -> Tuple[str, ...]:
    """SQL 에 등장하는 바인딩 이름 (첫 등장 순서, 중복 제거)"""
    seen = []
    for name in _PLACEHOLDER.findall(sql):
        if name not in seen:
            seen.append(name)
    return tuple(seen)


def compose(
    template: str,
    predicates: Sequence[Predicate] = (),
    expanding: Sequence[str] = (),
    **params: Any,
) -> ComposedQuery:
    included = [p for p in predicates if p.included]

    for p in included:
        if placeholders(p.fragment) != (p.name,):
            raise ValueError(f"predicate fragment must bind exactly :{p.name}: {p.fragment!r}")

    if _FILTERS_SLOT in template:
        sql = template.replace(_FILTERS_SLOT, "\n".join(p.fragment for p in included))
    elif included:
        raise ValueError("template has no {filters} slot for optional predicates")
    else:
        sql = template

    ordered: Dict[str, Any] = {}
    for p in included:
        ordered[p.name] = p.value
    for name, value in params.items():
        if name in ordered:
            raise ValueError(f"duplicate bind parameter :{name}")
        ordered[name] = value

    bound = set(placeholders(sql))
    if bound != set(ordered):
        missing = sorted(bound - set(ordered))
        unused = sorted(set(ordered) - bound)
        raise ValueError(f"bind parameters out of sync (missing={missing}, unused={unused})")

    unknown = [name for name in expanding if name not in ordered]
    if unknown:
        raise ValueError(f"expanding parameters not bound: {unknown}")

    return ComposedQuery(sql=sql, params=ordered, expanding=tuple(expanding))


def optional(fragment: str, name: str, value: Optional[Any]) -> Predicate:
    # 빈 문자열도 "조건 없음"으로 취급
    if value == "":
        value = None
    return Predicate(fragment=fragment, name=name, value=value)
