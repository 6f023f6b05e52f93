from datetime import date
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.crud.base import CRUDBase
from app.core.constants import ExamStatusEnum
from app.models.exam import Exam
from app.models.station import Station
from app.models.question import Question
from app.schemas.exam import ExamCreate, ExamSync


class CRUDExam(CRUDBase[Exam, ExamCreate, ExamSync]):

    def _query_with_graph(self, db: Session):
        return db.query(Exam).options(
            selectinload(Exam.stations)
            .selectinload(Station.questions)
            .selectinload(Question.options),
            selectinload(Exam.evaluators),
        )

    def get_with_graph(self, db: Session, id: int) -> Optional[Exam]:
        return self._query_with_graph(db).filter(Exam.id == id).first()

    def get_many_with_graph(self, db: Session, ids: List[int]) -> List[Exam]:
        if not ids:
            return []
        return (
            self._query_with_graph(db)
            .filter(Exam.id.in_(ids))
            .order_by(Exam.id)
            .all()
        )

    def get_multi_filtered(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        status: Optional[ExamStatusEnum] = None
    ) -> List[Exam]:
        query = db.query(Exam)
        if status:
            query = query.filter(Exam.status == status)
        return (
            query.order_by(Exam.application_date.desc(), Exam.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_active_before(self, db: Session, cutoff: date) -> List[Exam]:
        return (
            db.query(Exam)
            .filter(Exam.application_date.isnot(None))
            .filter(Exam.application_date < cutoff)
            .filter(Exam.status == ExamStatusEnum.ACTIVE)
            .order_by(Exam.id)
            .all()
        )

exam = CRUDExam(Exam)
