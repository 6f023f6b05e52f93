from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_answers_session_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False, index=True)
    response_text = Column(String, nullable=True)
    selected_option_ids = Column(JSON, nullable=True) # List of option ids for choice questions
    response_value = Column(Float, nullable=True) # Numeric scale value
    awarded_score = Column(Float, nullable=True)
    comment = Column(String, nullable=True)
    answered_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    session = relationship("ExamSession", back_populates="answers")
    question = relationship("Question", back_populates="answers")
