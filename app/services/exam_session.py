import logging
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import SessionStatusEnum
from app.core.exceptions import (
    ConflictError,
    DomainError,
    IncompleteStationError,
    NotFoundError,
)
from app.crud.answer import answer as crud_answer
from app.crud.evaluator import evaluator as crud_evaluator
from app.crud.exam import exam as crud_exam
from app.crud.exam_session import exam_session as crud_exam_session
from app.crud.question import question as crud_question
from app.crud.station import station as crud_station
from app.crud.station_result import station_result as crud_station_result
from app.crud.student import student as crud_student
from app.models.answer import Answer
from app.models.exam_session import ExamSession
from app.models.question import Question
from app.models.station import Station
from app.models.station_result import StationResult
from app.schemas.exam_session import (
    AnswerBatchSubmit,
    AnswerResponse,
    AnswerSubmit,
    ExamSession as ExamSessionSchema,
    ExamSessionCreate,
    SessionResults,
    StationScore,
    Answer as AnswerSchema,
)
from app.services.scoring import scoring_service

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _answer_is_empty(answer: Answer) -> bool:
    return (
        (answer.response_text is None or not answer.response_text.strip())
        and not answer.selected_option_ids
        and answer.response_value is None
    )


class ExamSessionService:
    """Drives one student's attempt: pending -> in progress -> completed."""

    def _get_session_or_404(self, db: Session, session_id: int) -> ExamSession:
        session = crud_exam_session.get(db, id=session_id)
        if not session:
            raise NotFoundError("Exam session not found.", details={"session_id": session_id})
        return session

    def _require_in_progress(self, session: ExamSession, action: str):
        if session.status != SessionStatusEnum.IN_PROGRESS:
            raise ConflictError(
                f"Cannot {action} for a session that is not in progress.",
                details={"session_id": session.id, "status": session.status.value},
            )

    def _get_question_for_session(self, db: Session, session: ExamSession, question_id: int) -> Question:
        question = crud_question.get(db, id=question_id)
        if not question or question.station.exam_id != session.exam_id:
            raise NotFoundError(
                "Question not found in this session's exam.",
                details={"session_id": session.id, "question_id": question_id},
            )
        return question

    def _get_station_for_session(self, db: Session, session: ExamSession, station_id: int) -> Station:
        station = crud_station.get(db, id=station_id)
        if not station or station.exam_id != session.exam_id:
            raise NotFoundError(
                "Station not found in this session's exam.",
                details={"session_id": session.id, "station_id": station_id},
            )
        return station

    def assign(self, db: Session, session_in: ExamSessionCreate) -> ExamSession:
        if not crud_exam.get(db, id=session_in.exam_id):
            raise NotFoundError("Exam not found.", details={"exam_id": session_in.exam_id})
        if not crud_student.get(db, id=session_in.student_id):
            raise NotFoundError("Student not found.", details={"student_id": session_in.student_id})
        if not crud_evaluator.get(db, id=session_in.evaluator_id):
            raise NotFoundError("Evaluator not found.", details={"evaluator_id": session_in.evaluator_id})

        if crud_exam_session.get_by_student_and_exam(db, session_in.student_id, session_in.exam_id):
            raise ConflictError(
                "The student is already assigned to this exam.",
                details={"student_id": session_in.student_id, "exam_id": session_in.exam_id},
            )

        try:
            session = crud_exam_session.create(
                db, obj_in={**session_in.model_dump(), "status": SessionStatusEnum.PENDING}
            )
        except IntegrityError:
            db.rollback()
            raise ConflictError(
                "The student is already assigned to this exam.",
                details={"student_id": session_in.student_id, "exam_id": session_in.exam_id},
            )
        logger.info(f"Session {session.id} assigned: student {session.student_id} on exam {session.exam_id}")
        return session

    def list_sessions(self, db: Session, exam_id: int, skip: int = 0, limit: int = 100) -> List[ExamSession]:
        if not crud_exam.get(db, id=exam_id):
            raise NotFoundError("Exam not found.", details={"exam_id": exam_id})
        return crud_exam_session.get_all_by_exam(db, exam_id, skip=skip, limit=limit)

    def start(self, db: Session, session_id: int) -> ExamSession:
        session = self._get_session_or_404(db, session_id)
        if session.status != SessionStatusEnum.PENDING:
            return session

        session = crud_exam_session.update(
            db,
            db_obj=session,
            obj_in={"status": SessionStatusEnum.IN_PROGRESS, "start_time": _now()},
        )
        logger.info(f"Session {session_id} started")
        return session

    def _answer_fields(self, question: Question, response: AnswerResponse) -> dict:
        return {
            "response_text": response.text,
            "selected_option_ids": sorted(set(response.selected_option_ids)) if response.selected_option_ids else None,
            "response_value": response.value,
            "awarded_score": scoring_service.score_answer(question, response),
            "comment": response.comment,
        }

    def _write_answer(self, db: Session, session: ExamSession, question: Question,
                      response: AnswerResponse) -> Answer:
        fields = self._answer_fields(question, response)
        existing = crud_answer.get_by_session_and_question(db, session.id, question.id)
        if existing:
            return crud_answer.update(db, db_obj=existing, obj_in=fields, commit=False)
        return crud_answer.create(
            db,
            obj_in={"session_id": session.id, "question_id": question.id, **fields},
            commit=False,
        )

    def submit_answer(self, db: Session, session_id: int, answer_in: AnswerSubmit) -> Answer:
        session = self._get_session_or_404(db, session_id)
        self._require_in_progress(session, "submit answers")
        question = self._get_question_for_session(db, session, answer_in.question_id)

        try:
            answer = self._write_answer(db, session, question, answer_in)
            db.commit()
        except IntegrityError:
            # another writer inserted the same (session, question) first: update its row
            db.rollback()
            existing = crud_answer.get_by_session_and_question(db, session_id, answer_in.question_id)
            if not existing:
                raise ConflictError(
                    "The answer could not be saved because of a concurrent write. Retry the request.",
                    details={"session_id": session_id, "question_id": answer_in.question_id},
                )
            answer = crud_answer.update(
                db, db_obj=existing, obj_in=self._answer_fields(question, answer_in), commit=False
            )
            db.commit()
        except DomainError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Session {session_id}: answer to question {answer_in.question_id} failed", exc_info=True)
            raise

        db.refresh(answer)
        return answer

    def submit_answers(self, db: Session, session_id: int, batch: AnswerBatchSubmit) -> List[Answer]:
        session = self._get_session_or_404(db, session_id)
        self._require_in_progress(session, "submit answers")

        questions = [self._get_question_for_session(db, session, a.question_id) for a in batch.answers]
        try:
            answers = [
                self._write_answer(db, session, question, answer_in)
                for question, answer_in in zip(questions, batch.answers)
            ]
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(
                "Some answers were written concurrently by another request. Retry the request.",
                details={"session_id": session_id},
            )
        except DomainError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Session {session_id}: batch answer submission failed", exc_info=True)
            raise

        for answer in answers:
            db.refresh(answer)
        return answers

    def _write_station_result(self, db: Session, session_id: int, station_id: int,
                              score: float, observations) -> StationResult:
        fields = {"score": score, "observations": observations, "evaluated_at": _now()}
        existing = crud_station_result.get_by_session_and_station(db, session_id, station_id)
        if existing:
            return crud_station_result.update(db, db_obj=existing, obj_in=fields, commit=False)
        return crud_station_result.create(
            db,
            obj_in={"session_id": session_id, "station_id": station_id, **fields},
            commit=False,
        )

    def complete_station(self, db: Session, session_id: int, station_id: int,
                         observations: str = None) -> StationResult:
        session = self._get_session_or_404(db, session_id)
        self._require_in_progress(session, "complete stations")
        station = self._get_station_for_session(db, session, station_id)

        questions = crud_question.get_by_station(db, station_id=station.id)
        answers = {
            a.question_id: a
            for a in crud_answer.get_by_session_and_questions(db, session.id, [q.id for q in questions])
        }
        missing = [
            q.id for q in questions
            if q.required and (q.id not in answers or _answer_is_empty(answers[q.id]))
        ]
        if missing:
            raise IncompleteStationError(
                "Every required question of the station must be answered before completing it.",
                details={"station_id": station.id, "missing_question_ids": missing},
            )

        score = scoring_service.station_score((a.awarded_score for a in answers.values()), station.max_score)
        try:
            result = self._write_station_result(db, session.id, station.id, score, observations)
            db.commit()
        except IntegrityError:
            db.rollback()
            result = self._write_station_result(db, session_id, station_id, score, observations)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Session {session_id}: completing station {station_id} failed", exc_info=True)
            raise

        db.refresh(result)
        logger.info(f"Session {session_id}: station {station_id} completed with score {score}")
        return result

    def finalize(self, db: Session, session_id: int, observations: str = None) -> Tuple[ExamSession, bool]:
        """Close the session; returns the session and whether this call finalized it."""
        session = self._get_session_or_404(db, session_id)
        if session.status == SessionStatusEnum.COMPLETED:
            return session, False
        self._require_in_progress(session, "finalize")

        required = crud_station.get_active_by_exam(db, exam_id=session.exam_id)
        results = crud_station_result.get_all_by_session(db, session.id)
        completed_station_ids = {r.station_id for r in results}
        missing = [s.id for s in required if s.id not in completed_station_ids]
        if missing:
            raise IncompleteStationError(
                "Every station must be completed before finalizing the session.",
                details={"session_id": session.id, "missing_station_ids": missing},
            )

        grade = scoring_service.overall_grade([r.score for r in results])
        update_data = {"status": SessionStatusEnum.COMPLETED, "end_time": _now(), "grade": grade}
        if observations is not None:
            update_data["observations"] = observations
        session = crud_exam_session.update(db, db_obj=session, obj_in=update_data)

        logger.info(f"Session {session_id} finalized with grade {grade}")
        return session, True

    def get_session_results(self, db: Session, session_id: int) -> SessionResults:
        session = self._get_session_or_404(db, session_id)
        exam = crud_exam.get(db, id=session.exam_id)
        stations = crud_station.get_by_exam(db, exam_id=session.exam_id)
        results = {r.station_id: r for r in crud_station_result.get_all_by_session(db, session.id)}
        answers = crud_answer.get_all_by_session(db, session.id)

        station_scores = []
        for station in stations:
            result = results.get(station.id)
            station_scores.append(StationScore(
                station_id=station.id,
                title=station.title,
                order=station.order,
                score=result.score if result else None,
                max_score=station.max_score,
                observations=result.observations if result else None,
                evaluated_at=result.evaluated_at if result else None,
            ))

        return SessionResults(
            session=ExamSessionSchema.model_validate(session),
            exam_title=exam.title,
            stations=station_scores,
            answers=[AnswerSchema.model_validate(a) for a in answers],
            total_score=sum(r.score for r in results.values()),
            max_score=sum(s.max_score for s in stations if s.active),
        )


exam_session_service = ExamSessionService()
