import logging
from datetime import date
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import DUPLICATE_TITLE_DATE_FORMAT, ExamStatusEnum
from app.core.exceptions import NotFoundError
from app.crud.exam import exam as crud_exam
from app.crud.station import station as crud_station
from app.models.exam import Exam
from app.models.station import Station
from app.schemas.exam import OptionIn, QuestionIn, StationIn
from app.services.exam_sync import exam_sync_service

logger = logging.getLogger(__name__)


class ExamDuplicationService:

    def _station_payload(self, db_station: Station) -> StationIn:
        return StationIn(
            title=db_station.title,
            description=db_station.description,
            duration_minutes=db_station.duration_minutes,
            order=db_station.order,
            active=db_station.active,
            questions=[
                QuestionIn(
                    text=db_question.text,
                    type=db_question.question_type,
                    required=db_question.required,
                    order=db_question.order,
                    min_value=db_question.min_value,
                    max_value=db_question.max_value,
                    score_weight=db_question.score_weight,
                    options=[
                        OptionIn(text=o.text, is_correct=o.is_correct, order=o.order)
                        for o in db_question.options
                    ],
                )
                for db_question in db_station.questions
            ],
        )

    def duplicated_title(self, title: str, application_date: date) -> str:
        return f"{title} ({application_date.strftime(DUPLICATE_TITLE_DATE_FORMAT)})"

    def _clone(self, db: Session, source: Exam, application_date: date) -> int:
        new_exam = crud_exam.create(
            db,
            obj_in={
                "title": self.duplicated_title(source.title, application_date),
                "description": source.description,
                "application_date": application_date,
                "status": ExamStatusEnum.ACTIVE,
                "revision": 1,
            },
            commit=False,
        )
        for db_station in source.stations:
            exam_sync_service.insert_station_tree(db, new_exam, self._station_payload(db_station))
        crud_station.recompute_max_scores(db, exam_id=new_exam.id)
        return new_exam.id

    def duplicate(self, db: Session, exam_ids: Iterable[int], application_date: date) -> List[int]:
        """Clone every requested exam in one transaction; all or none are created."""
        requested = sorted(set(exam_ids))
        sources = crud_exam.get_many_with_graph(db, requested)
        missing = sorted(set(requested) - {e.id for e in sources})
        if missing:
            raise NotFoundError("Some exams were not found.", details={"exam_ids": missing})

        try:
            new_exam_ids = [self._clone(db, source, application_date) for source in sources]
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Duplication of exams {requested} failed, transaction rolled back", exc_info=True)
            raise

        logger.info(f"Duplicated exams {requested} into {new_exam_ids} for {application_date.isoformat()}")
        return new_exam_ids

    def duplicate_exam(self, db: Session, exam_id: int, application_date: date) -> Exam:
        new_exam_id = self.duplicate(db, [exam_id], application_date)[0]
        return crud_exam.get_with_graph(db, id=new_exam_id)


exam_duplication_service = ExamDuplicationService()
