from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.answer import Answer

class CRUDAnswer(CRUDBase[Answer, dict, dict]):

    def get_by_session_and_question(self, db: Session, session_id: int,
                                    question_id: int) -> Optional[Answer]:
        return (
            db.query(Answer)
            .filter(Answer.session_id == session_id)
            .filter(Answer.question_id == question_id)
            .first()
        )

    def get_all_by_session(self, db: Session, session_id: int) -> List[Answer]:
        return (
            db.query(Answer)
            .filter(Answer.session_id == session_id)
            .order_by(Answer.id)
            .all()
        )

    def get_by_session_and_questions(self, db: Session, session_id: int,
                                     question_ids: List[int]) -> List[Answer]:
        if not question_ids:
            return []
        return (
            db.query(Answer)
            .filter(Answer.session_id == session_id)
            .filter(Answer.question_id.in_(question_ids))
            .all()
        )

answer = CRUDAnswer(Answer)
