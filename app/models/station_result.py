from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class StationResult(Base):
    __tablename__ = "station_results"
    __table_args__ = (
        UniqueConstraint("session_id", "station_id", name="uq_station_results_session_station"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id"), nullable=False, index=True)
    station_id = Column(Integer, ForeignKey("stations.id"), nullable=False, index=True)
    score = Column(Float, nullable=False, default=0.0)
    observations = Column(String, nullable=True)
    evaluated_at = Column(DateTime(timezone=True), nullable=False)

    session = relationship("ExamSession", back_populates="station_results")
    station = relationship("Station", back_populates="results")
