"""
config/log_config.py

- 콘솔 로그 + (선택) 파일 로그(combined.log / error.log) 설정
- 각 모듈은 logging.getLogger(__name__) 로 로거를 얻어 사용합니다.
"""

import logging
import os

from config.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(settings: Settings) -> None:
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)

    # 재호출(테스트에서 create_app 반복) 시 핸들러 중복 방지
    for handler in list(root.handlers):
        if getattr(handler, "_school_reports", False):
            root.removeHandler(handler)

    handlers = [logging.StreamHandler()]

    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "combined.log"), encoding="utf-8"))
        error_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, "error.log"), encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._school_reports = True
        root.addHandler(handler)

    # 라이브러리 디버그 로그 비활성화
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
