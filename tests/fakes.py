import re
from dataclasses import replace

from database.executor import QueryExecutor


class FakeExecutor:
    """쿼리를 기록하고 미리 정한 행(또는 예외)을 돌려주는 가짜 실행기"""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.ping_error = None
        self.queries = []
        self.disposed = False

    def fetch_all(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return [dict(row) for row in self.rows]

    def ping(self):
        if self.ping_error:
            raise self.ping_error

    def dispose(self):
        self.disposed = True


_SEPARATOR = re.compile(r"\s+SEPARATOR\s+('[^']*')")


def mysql_concat(*args):
    # MySQL CONCAT: 인자 중 하나라도 NULL 이면 NULL
    if any(a is None for a in args):
        return None
    return "".join(str(a) for a in args)


def register_mysql_functions(dbapi_connection, connection_record):
    dbapi_connection.create_function("CONCAT", -1, mysql_concat)


class SqliteReportExecutor(QueryExecutor):
    """GROUP_CONCAT(x SEPARATOR 's') → GROUP_CONCAT(x, 's') 로 바꿔 SQLite 에서 실행"""

    def fetch_all(self, query):
        return super().fetch_all(replace(query, sql=_SEPARATOR.sub(r", \1", query.sql)))
