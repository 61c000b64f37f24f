from fastapi import Request

from database.executor import QueryExecutor


# ✅ 앱 기동 시 만든 실행기를 라우터에 주입 (테스트에서는 가짜 실행기로 교체)
def get_executor(request: Request) -> QueryExecutor:
    return request.app.state.executor
