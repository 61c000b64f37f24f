import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from main import create_app
from scripts.seed_db import seed
from fakes import FakeExecutor, SqliteReportExecutor, register_mysql_functions


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def client(executor):
    app = create_app(executor=executor)
    return TestClient(app)


@pytest.fixture
def sqlite_engine():
    # 단일 커넥션 공유 in-memory DB
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    event.listen(engine, "connect", register_mysql_functions)
    seed(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_executor(sqlite_engine):
    return SqliteReportExecutor(sqlite_engine)
