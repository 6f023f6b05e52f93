from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import SessionStatusEnum

class ExamSession(Base):
    __tablename__ = "exam_sessions"
    __table_args__ = (
        UniqueConstraint("student_id", "exam_id", name="uq_exam_sessions_student_exam"),
    )

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    evaluator_id = Column(Integer, ForeignKey("evaluators.id"), nullable=False, index=True)
    status = Column(Enum(SessionStatusEnum), nullable=False, default=SessionStatusEnum.PENDING)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    grade = Column(Float, nullable=True)
    observations = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="sessions")
    student = relationship("Student", back_populates="sessions")
    evaluator = relationship("Evaluator", back_populates="sessions")
    answers = relationship("Answer", back_populates="session")
    station_results = relationship("StationResult", back_populates="session")
