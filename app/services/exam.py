import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import ExamStatusEnum
from app.core.exceptions import NotFoundError, ReferentialIntegrityError
from app.crud.exam import exam as crud_exam
from app.crud.exam_session import exam_session as crud_exam_session
from app.models.exam import Exam
from app.schemas.exam import ExamCreate, ExamSync
from app.services.exam_sync import exam_sync_service

logger = logging.getLogger(__name__)


class ExamService:

    def _get_exam_or_404(self, db: Session, exam_id: int) -> Exam:
        exam = crud_exam.get_with_graph(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.", details={"exam_id": exam_id})
        return exam

    def create_exam(self, db: Session, exam_in: ExamCreate) -> Exam:
        return exam_sync_service.create(db, exam_in)

    def get_exam(self, db: Session, exam_id: int) -> Exam:
        return self._get_exam_or_404(db, exam_id)

    def get_all_exams(self, db: Session, skip: int = 0, limit: int = 100,
                      status: Optional[ExamStatusEnum] = None) -> List[Exam]:
        return crud_exam.get_multi_filtered(db, skip=skip, limit=limit, status=status)

    def update_exam(self, db: Session, exam_id: int, exam_in: ExamSync) -> Exam:
        return exam_sync_service.synchronize(db, exam_id, exam_in)

    def delete_exam(self, db: Session, exam_id: int) -> int:
        exam = self._get_exam_or_404(db, exam_id)

        session_count = crud_exam_session.count_by_exam(db, exam_id)
        if session_count:
            raise ReferentialIntegrityError(
                "The exam has assigned sessions and cannot be deleted.",
                details={"exam_id": exam_id, "session_count": session_count},
            )

        try:
            exam.evaluators = []
            db.delete(exam)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        logger.info(f"Exam {exam_id} deleted")
        return exam_id

    def deactivate_past_exams(self, db: Session, today: Optional[date] = None) -> List[int]:
        """Mark active exams whose application date has passed as inactive."""
        cutoff = today or date.today()
        exams = crud_exam.get_active_before(db, cutoff)
        for exam in exams:
            exam.status = ExamStatusEnum.INACTIVE
        db.commit()

        exam_ids = [e.id for e in exams]
        if exam_ids:
            logger.info(f"Deactivated {len(exam_ids)} exams past their application date: {exam_ids}")
        return exam_ids


exam_service = ExamService()
