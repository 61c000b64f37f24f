"""
scripts/seed_db.py

학교 DB 스키마 생성 + 샘플 데이터(data/*.csv) 적재
- 실행: python -m scripts.seed_db  (프로젝트 루트에서)
- --reset 옵션 시 기존 테이블 삭제 후 다시 생성
- seed(engine) 는 테스트에서 SQLite 엔진으로도 호출 가능
"""

import argparse
import csv
import logging
import os
from datetime import date

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from config.log_config import setup_logging
from config.settings import settings
from database.db import Base, SessionLocal, build_engine
from models.courses import Course as CourseModel           # ✅ 모델 import
from models.enrollments import Enrollment as EnrollmentModel
from models.students import Student as StudentModel

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")


def _read_csv(name: str, data_dir: str):
    with open(os.path.join(data_dir, name), newline="", encoding="utf-8-sig") as csvfile:
        return list(csv.DictReader(csvfile))


def load_students(db: Session, data_dir: str) -> int:
    rows = _read_csv("students.csv", data_dir)
    for row in rows:
        db.add(StudentModel(
            student_id=int(row["student_id"]),                         # 고유 학생 ID
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            grade=int(row["grade"]),                                   # 학년 (9~12)
            enrollment_date=date.fromisoformat(row["enrollment_date"]),
        ))
    return len(rows)


def load_courses(db: Session, data_dir: str) -> int:
    rows = _read_csv("courses.csv", data_dir)
    for row in rows:
        db.add(CourseModel(
            course_id=int(row["course_id"]),
            course_name=row["course_name"],
            department=row["department"],
            credits=int(row["credits"]),
            description=row["description"] or None,
        ))
    return len(rows)


def load_enrollments(db: Session, data_dir: str) -> int:
    rows = _read_csv("enrollments.csv", data_dir)
    for row in rows:
        db.add(EnrollmentModel(
            student_id=int(row["student_id"]),
            course_id=int(row["course_id"]),
            enrollment_date=date.fromisoformat(row["enrollment_date"]),
            grade=row["grade"] or None,                                # 빈 값 = 수강 중
        ))
    return len(rows)


def seed(engine: Engine, data_dir: str = DATA_DIR, reset: bool = False) -> dict:
    if reset:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal(bind=engine)
    try:
        counts = {"students": load_students(db, data_dir), "courses": load_courses(db, data_dir)}
        db.flush()
        counts["enrollments"] = load_enrollments(db, data_dir)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    logger.info(
        f"Seeded {counts['students']} students, {counts['courses']} courses, "
        f"{counts['enrollments']} enrollments"
    )
    return counts


def main():
    parser = argparse.ArgumentParser(description="학교 DB 스키마 생성 및 샘플 데이터 적재")
    parser.add_argument("--reset", action="store_true", help="기존 테이블 삭제 후 다시 생성")
    parser.add_argument("--data-dir", default=DATA_DIR, help="CSV 디렉터리 (기본: data/)")
    args = parser.parse_args()

    setup_logging(settings)
    engine = build_engine(settings)
    try:
        seed(engine, data_dir=args.data_dir, reset=args.reset)
    finally:
        engine.dispose()
    print("✅ 샘플 데이터 CSV → DB 적재 완료")


if __name__ == "__main__":
    main()
