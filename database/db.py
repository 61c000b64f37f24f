from sqlalchemy import create_engine               # SQLAlchemy 엔진 생성 도구
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base         # 모델의 Base 클래스
from sqlalchemy.orm import sessionmaker             # 세션 팩토리 함수

from config.settings import Settings


def build_engine(settings: Settings) -> Engine:
    """
    설정값으로 MySQL 엔진(커넥션 풀) 생성
    - pool_size 고정, max_overflow=0 → 동시 연결은 DB_POOL_SIZE개를 넘지 않음
    - 풀이 가득 차면 DB_POOL_TIMEOUT초까지 대기 후 TimeoutError
    - 엔진 생성만으로는 실제 연결이 일어나지 않음(첫 쿼리 시 연결)
    """
    return create_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
    )


# ✅ 세션 팩토리: 스크립트(scripts/seed_db.py)에서 ORM 세션 생성에 사용
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()
