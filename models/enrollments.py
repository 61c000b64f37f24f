from sqlalchemy import CHAR, Column, Date, DateTime, ForeignKey, Index, Integer, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database.db import Base

class Enrollment(Base):
    __tablename__ = "enrollments"  # 학생-과목 수강 연결 테이블

    enrollment_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False)
    enrollment_date = Column(Date, nullable=False, index=True)           # 수강 신청일
    grade = Column(CHAR(1))                                              # 성적 (A~F, NULL = 수강 중)
    created_at = Column(DateTime, server_default=func.now())

    # ==========================================================
    # [관계 설정]
    # ==========================================================
    student = relationship("Student", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")

    # ✅ 같은 학생이 같은 과목을 두 번 수강 신청할 수 없음
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="unique_enrollment"),
        Index("idx_student_course", "student_id", "course_id"),
    )
