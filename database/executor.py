"""
database/executor.py

- 리포트 쿼리 실행기: ComposedQuery(SQL + 바인딩 파라미터) → dict 행 목록
- 앱 기동 시 한 번 생성되어 app.state.executor 에 보관되고,
  라우터에는 dependencies.database.get_executor 로 주입됩니다.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.engine import Engine

from services.query_composer import ComposedQuery

logger = logging.getLogger(__name__)


class QueryExecutor:
    def __init__(self, engine: Engine):
        self.engine = engine

    def fetch_all(self, query: ComposedQuery) -> List[Dict[str, Any]]:
        # 읽기 전용: 커넥션을 풀에서 빌려 실행 후 즉시 반납
        with self.engine.connect() as conn:
            result = conn.execute(query.to_clause(), dict(query.params))
            return [dict(row) for row in result.mappings()]

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database pool closed")
