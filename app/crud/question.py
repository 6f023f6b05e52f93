from typing import Dict, List, Set
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.question import Question
from app.models.answer import Answer
from app.schemas.exam import QuestionIn

class CRUDQuestion(CRUDBase[Question, QuestionIn, QuestionIn]):
    def get_by_station(self, db: Session, *, station_id: int) -> List[Question]:
        return (
            db.query(Question)
            .filter(Question.station_id == station_id)
            .order_by(Question.order, Question.id)
            .all()
        )

    def ids_by_station(self, db: Session, station_ids: List[int]) -> Dict[int, List[int]]:
        if not station_ids:
            return {}
        rows = (
            db.query(Question.station_id, Question.id)
            .filter(Question.station_id.in_(station_ids))
            .all()
        )
        grouped: Dict[int, List[int]] = {}
        for station_id, question_id in rows:
            grouped.setdefault(station_id, []).append(question_id)
        return grouped

    def ids_with_answers(self, db: Session, question_ids: List[int]) -> Set[int]:
        if not question_ids:
            return set()
        rows = (
            db.query(Answer.question_id)
            .filter(Answer.question_id.in_(question_ids))
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

question = CRUDQuestion(Question)
