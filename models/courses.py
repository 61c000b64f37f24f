from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship
from database.db import Base

class Course(Base):
    __tablename__ = "courses"  # 과목 정보 테이블

    course_id = Column(Integer, primary_key=True, autoincrement=True)    # 과목 고유 ID (Primary Key)
    course_name = Column(String(100), nullable=False)                    # 과목 이름 (예: Algebra I)
    department = Column(String(50), nullable=False, index=True)          # 학과 (예: Mathematics)
    credits = Column(Integer, nullable=False)                            # 학점 (1 이상)
    description = Column(Text)                                           # 과목 설명
    created_at = Column(DateTime, server_default=func.now())

    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("credits > 0", name="ck_courses_credits_positive"),
    )
