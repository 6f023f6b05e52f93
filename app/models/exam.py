from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Table, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ExamStatusEnum

exam_evaluators_association = Table(
    "exam_evaluators",
    Base.metadata,
    Column("exam_id", Integer, ForeignKey("exams.id", ondelete="CASCADE"), primary_key=True),
    Column("evaluator_id", Integer, ForeignKey("evaluators.id"), primary_key=True),
)

class Exam(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    application_date = Column(Date, nullable=True)
    status = Column(Enum(ExamStatusEnum), nullable=False, default=ExamStatusEnum.ACTIVE)
    revision = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    stations = relationship(
        "Station",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="Station.order",
    )
    evaluators = relationship("Evaluator", secondary=exam_evaluators_association, back_populates="exams")
    sessions = relationship("ExamSession", back_populates="exam")

    @property
    def evaluator_ids(self):
        return sorted(e.id for e in self.evaluators)
