from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.exam_session import ExamSession
from app.schemas.exam_session import ExamSessionCreate

class CRUDExamSession(CRUDBase[ExamSession, ExamSessionCreate, dict]):

    def get_by_student_and_exam(self, db: Session, student_id: int, exam_id: int) -> Optional[ExamSession]:
        return (
            db.query(ExamSession)
            .filter(ExamSession.student_id == student_id)
            .filter(ExamSession.exam_id == exam_id)
            .first()
        )

    def get_all_by_exam(self, db: Session, exam_id: int, skip: int = 0, limit: int = 100) -> List[ExamSession]:
        return (
            db.query(ExamSession)
            .filter(ExamSession.exam_id == exam_id)
            .order_by(ExamSession.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_exam(self, db: Session, exam_id: int) -> int:
        return db.query(ExamSession).filter(ExamSession.exam_id == exam_id).count()

exam_session = CRUDExamSession(ExamSession)
