from typing import List
from sqlalchemy.orm import Session

from app.models.answer import Answer
from app.models.option import Option
from app.models.question import Question
from app.models.station import Station
from app.models.station_result import StationResult


def options_of_exam(db: Session, exam_id: int) -> List[Option]:
    return (
        db.query(Option)
        .join(Question, Question.id == Option.question_id)
        .join(Station, Station.id == Question.station_id)
        .filter(Station.exam_id == exam_id)
        .all()
    )

def count_answers(db: Session, session_id: int, question_id: int) -> int:
    return (
        db.query(Answer)
        .filter(Answer.session_id == session_id)
        .filter(Answer.question_id == question_id)
        .count()
    )

def count_station_results(db: Session, session_id: int, station_id: int) -> int:
    return (
        db.query(StationResult)
        .filter(StationResult.session_id == session_id)
        .filter(StationResult.station_id == station_id)
        .count()
    )
