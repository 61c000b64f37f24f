from sqlalchemy import Column, Date, DateTime, Integer, String, func
from sqlalchemy.orm import relationship
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    student_id = Column(Integer, primary_key=True, autoincrement=True)   # 고유 학생 ID (Primary Key)
    first_name = Column(String(50), nullable=False)                      # 이름
    last_name = Column(String(50), nullable=False)                       # 성
    email = Column(String(100), nullable=False, unique=True, index=True) # 이메일 (중복 불가)
    grade = Column(Integer, nullable=False, index=True)                  # 학년 (9~12)
    enrollment_date = Column(Date, nullable=False)                       # 입학일
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # ✅ 수강 기록과의 관계 (1:N), 학생 삭제 시 수강 기록도 삭제
    enrollments = relationship("Enrollment", back_populates="student", cascade="all, delete-orphan")
