import logging
from typing import Dict, List, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import NodeTagEnum, QuestionTypeEnum
from app.core.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from app.crud.exam import exam as crud_exam
from app.crud.evaluator import evaluator as crud_evaluator
from app.crud.question import question as crud_question
from app.crud.station import station as crud_station
from app.models.exam import Exam
from app.models.option import Option
from app.models.question import Question
from app.models.station import Station
from app.schemas.exam import ExamCreate, ExamSync, OptionIn, QuestionIn, StationIn
from app.services.exam_graph import GraphPlan, PlannedNode, build_plan

logger = logging.getLogger(__name__)


def _station_fields(station_in: StationIn) -> dict:
    return {
        "title": station_in.title,
        "description": station_in.description,
        "duration_minutes": station_in.duration_minutes,
        "order": station_in.order,
        "active": station_in.active,
    }


def _question_fields(question_in: QuestionIn) -> dict:
    return {
        "text": question_in.text,
        "question_type": question_in.type,
        "required": question_in.required,
        "order": question_in.order,
        "score_weight": question_in.score_weight,
        "min_value": question_in.min_value,
        "max_value": question_in.max_value,
    }


def _option_fields(option_in: OptionIn) -> dict:
    return {
        "text": option_in.text,
        "is_correct": option_in.is_correct,
        "order": option_in.order,
    }


class _StoredGraph:
    """Identity maps of the exam's currently persisted nodes."""

    def __init__(self, exam: Exam):
        self.stations: Dict[int, Station] = {}
        self.questions: Dict[int, Question] = {}
        self.options: Dict[int, Option] = {}
        for db_station in exam.stations:
            self.stations[db_station.id] = db_station
            for db_question in db_station.questions:
                self.questions[db_question.id] = db_question
                for db_option in db_question.options:
                    self.options[db_option.id] = db_option


class ExamSyncService:

    # Insert traversal, shared with exam creation and duplication

    # Children are attached through the parent collection; a pending child
    # known only by its foreign key counts as an orphan on flush.

    def insert_station_tree(self, db: Session, exam: Exam, station_in: StationIn) -> Station:
        db_station = Station(**_station_fields(station_in))
        exam.stations.append(db_station)
        for question_in in station_in.questions:
            self.insert_question_tree(db, db_station, question_in)
        db.flush()
        return db_station

    def insert_question_tree(self, db: Session, db_station: Station, question_in: QuestionIn) -> Question:
        db_question = Question(**_question_fields(question_in))
        db_station.questions.append(db_question)
        for option_in in question_in.options:
            db_question.options.append(Option(**_option_fields(option_in)))
        db.flush()
        return db_question

    # Validation, no writes

    def validate_question_payloads(self, questions: List[QuestionIn]):
        for question_in in questions:
            if (
                question_in.min_value is not None
                and question_in.max_value is not None
                and question_in.min_value > question_in.max_value
            ):
                raise ValidationError(
                    f"Question '{question_in.text}' has a minimum value above its maximum value.",
                    details={"question_id": question_in.id},
                )

    def _validate_single_choice(self, plan: GraphPlan, stored: _StoredGraph):
        for question_node in plan.questions.values():
            question_in = question_node.data
            if question_in.type != QuestionTypeEnum.SINGLE_CHOICE:
                continue
            planned_options = list(plan.options_of(question_node.key))
            correct = sum(1 for o in planned_options if o.data.is_correct)
            if question_node.tag == NodeTagEnum.EXISTING:
                # options left untouched by the request keep their stored flag
                planned_ids = {o.id for o in planned_options if o.id is not None}
                for db_option in stored.questions[question_node.id].options:
                    if db_option.id in planned_ids or db_option.id in plan.removed_option_ids:
                        continue
                    if db_option.is_correct:
                        correct += 1
            if correct > 1:
                raise ValidationError(
                    f"Single-choice question '{question_in.text}' has more than one correct option.",
                    details={"question_id": question_node.id},
                )

    def _validate_against_store(self, db: Session, exam: Exam, graph: ExamSync,
                                plan: GraphPlan, stored: _StoredGraph):
        if graph.revision is not None and graph.revision != exam.revision:
            raise ConflictError(
                "The exam was modified by another editor. Reload it and apply your changes again.",
                details={"expected_revision": exam.revision, "received_revision": graph.revision},
            )

        for kind, known, wanted in (
            ("station", stored.stations, plan.existing_ids(plan.stations) | plan.removed_station_ids),
            ("question", stored.questions, plan.existing_ids(plan.questions) | plan.removed_question_ids),
            ("option", stored.options, plan.existing_ids(plan.options) | plan.removed_option_ids),
        ):
            unknown = sorted(wanted - set(known))
            if unknown:
                raise NotFoundError(
                    f"Some {kind}s do not belong to exam {exam.id}.",
                    details={f"{kind}_ids": unknown},
                )

        for question_node in plan.questions.values():
            if question_node.tag != NodeTagEnum.EXISTING:
                continue
            parent = plan.stations[question_node.parent_key]
            if stored.questions[question_node.id].station_id != parent.id:
                raise ValidationError(
                    "Existing questions cannot be moved to another station.",
                    details={"question_id": question_node.id},
                )

        for option_node in plan.options.values():
            if option_node.tag != NodeTagEnum.EXISTING:
                continue
            parent = plan.questions[option_node.parent_key]
            if stored.options[option_node.id].question_id != parent.id:
                raise ValidationError(
                    "Existing options cannot be moved to another question.",
                    details={"option_id": option_node.id},
                )

        under_removed = sorted(
            q_id for q_id in plan.existing_ids(plan.questions)
            if stored.questions[q_id].station_id in plan.removed_station_ids
        )
        if under_removed:
            raise ValidationError(
                "Questions of a removed station cannot be kept.",
                details={"question_ids": under_removed},
            )

        removed_question_ids = plan.removed_question_ids | {
            q.id for s_id in plan.removed_station_ids for q in stored.stations[s_id].questions
        }
        under_removed = sorted(
            o_id for o_id in plan.existing_ids(plan.options)
            if stored.options[o_id].question_id in removed_question_ids
        )
        if under_removed:
            raise ValidationError(
                "Options of a removed question cannot be kept.",
                details={"option_ids": under_removed},
            )

        missing_evaluators = sorted(
            set(graph.evaluator_ids) - {e.id for e in crud_evaluator.get_many(db, graph.evaluator_ids)}
        )
        if missing_evaluators:
            raise NotFoundError(
                "Some evaluators do not exist.",
                details={"evaluator_ids": missing_evaluators},
            )

        self.validate_question_payloads([n.data for n in plan.questions.values()])
        self._validate_single_choice(plan, stored)

    # Write steps

    def _apply_exam_fields(self, db: Session, exam: Exam, graph: ExamSync):
        crud_exam.update(
            db,
            db_obj=exam,
            obj_in={
                "title": graph.title,
                "description": graph.description,
                "application_date": graph.application_date,
                "status": graph.status,
            },
            commit=False,
        )

    def apply_evaluators(self, db: Session, exam: Exam, evaluator_ids: List[int]):
        current = {e.id for e in exam.evaluators}
        desired = set(evaluator_ids)
        to_remove = current - desired
        to_add = desired - current
        if to_remove:
            exam.evaluators = [e for e in exam.evaluators if e.id not in to_remove]
        if to_add:
            exam.evaluators.extend(crud_evaluator.get_many(db, sorted(to_add)))
        db.flush()

    def _blocked_removals(self, db: Session, plan: GraphPlan, stored: _StoredGraph) -> Dict[str, List[int]]:
        blocked: Dict[str, List[int]] = {}

        # an option is evidence once its question has been answered
        option_parents = {o_id: stored.options[o_id].question_id for o_id in plan.removed_option_ids}
        answered = crud_question.ids_with_answers(db, sorted(set(option_parents.values())))
        blocked_options = sorted(o_id for o_id, q_id in option_parents.items() if q_id in answered)
        if blocked_options:
            blocked["option_ids"] = blocked_options

        blocked_questions = sorted(crud_question.ids_with_answers(db, sorted(plan.removed_question_ids)))
        if blocked_questions:
            blocked["question_ids"] = blocked_questions

        station_ids = sorted(plan.removed_station_ids)
        blocked_stations: Set[int] = crud_station.ids_with_results(db, station_ids)
        questions_by_station = crud_question.ids_by_station(db, station_ids)
        answered = crud_question.ids_with_answers(
            db, [q_id for q_ids in questions_by_station.values() for q_id in q_ids]
        )
        for station_id, question_ids in questions_by_station.items():
            if answered.intersection(question_ids):
                blocked_stations.add(station_id)
        if blocked_stations:
            blocked["station_ids"] = sorted(blocked_stations)

        return blocked

    def _apply_removals(self, db: Session, exam: Exam, plan: GraphPlan, stored: _StoredGraph):
        blocked = self._blocked_removals(db, plan, stored)
        if blocked:
            logger.warning(f"Exam {exam.id}: removal blocked by recorded answers {blocked}")
            raise ReferentialIntegrityError(
                "Some stations, questions or options already have recorded answers and cannot be removed.",
                details=blocked,
            )

        for option_id in sorted(plan.removed_option_ids):
            db_option = stored.options[option_id]
            db_option.question.options.remove(db_option)
        db.flush()
        for question_id in sorted(plan.removed_question_ids):
            db_question = stored.questions[question_id]
            db_question.station.questions.remove(db_question)
        db.flush()
        for station_id in sorted(plan.removed_station_ids):
            exam.stations.remove(stored.stations[station_id])
        db.flush()

    def _apply_options(self, db: Session, plan: GraphPlan, question_node: PlannedNode,
                       db_question: Question, stored: _StoredGraph):
        for option_node in plan.options_of(question_node.key):
            if option_node.tag == NodeTagEnum.EXISTING:
                db_option = stored.options[option_node.id]
                for name, value in _option_fields(option_node.data).items():
                    setattr(db_option, name, value)
            else:
                db_question.options.append(Option(**_option_fields(option_node.data)))
        db.flush()

    def _apply_existing_station(self, db: Session, plan: GraphPlan, station_node: PlannedNode,
                                stored: _StoredGraph):
        db_station = stored.stations[station_node.id]
        for name, value in _station_fields(station_node.data).items():
            setattr(db_station, name, value)

        for question_node in plan.questions_of(station_node.key):
            if question_node.tag == NodeTagEnum.EXISTING:
                db_question = stored.questions[question_node.id]
                for name, value in _question_fields(question_node.data).items():
                    setattr(db_question, name, value)
                db.flush()
                self._apply_options(db, plan, question_node, db_question, stored)
            else:
                self.insert_question_tree(db, db_station, question_node.data)
        db.flush()

    def synchronize(self, db: Session, exam_id: int, graph: ExamSync) -> Exam:
        plan = build_plan(graph)

        exam = crud_exam.get_with_graph(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.", details={"exam_id": exam_id})

        stored = _StoredGraph(exam)
        self._validate_against_store(db, exam, graph, plan, stored)

        try:
            self._apply_exam_fields(db, exam, graph)
            self.apply_evaluators(db, exam, graph.evaluator_ids)
            self._apply_removals(db, exam, plan, stored)

            for station_node in plan.stations_tagged(NodeTagEnum.EXISTING):
                self._apply_existing_station(db, plan, station_node, stored)
            for station_node in plan.stations_tagged(NodeTagEnum.NEW):
                self.insert_station_tree(db, exam, station_node.data)

            crud_station.recompute_max_scores(db, exam_id=exam.id)
            new_revision = exam.revision + 1
            exam.revision = new_revision
            db.flush()
            db.commit()
        except DomainError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Exam {exam_id}: synchronization failed, transaction rolled back", exc_info=True)
            raise

        logger.info(
            f"Exam {exam_id} synchronized to revision {new_revision}: "
            f"{len(plan.stations_tagged(NodeTagEnum.NEW))} new stations, "
            f"{len(plan.removed_station_ids)} stations, {len(plan.removed_question_ids)} questions and "
            f"{len(plan.removed_option_ids)} options removed"
        )
        return crud_exam.get_with_graph(db, id=exam_id)

    def create(self, db: Session, exam_in: ExamCreate) -> Exam:
        plan = build_plan(exam_in)
        if plan.existing_ids(plan.stations) or plan.existing_ids(plan.questions) or plan.existing_ids(plan.options):
            raise ValidationError("A new exam cannot reference existing stations, questions or options.")

        missing_evaluators = sorted(
            set(exam_in.evaluator_ids) - {e.id for e in crud_evaluator.get_many(db, exam_in.evaluator_ids)}
        )
        if missing_evaluators:
            raise NotFoundError("Some evaluators do not exist.", details={"evaluator_ids": missing_evaluators})

        questions = [q for s in exam_in.stations for q in s.questions]
        self.validate_question_payloads(questions)
        for question_in in questions:
            if question_in.type == QuestionTypeEnum.SINGLE_CHOICE and sum(o.is_correct for o in question_in.options) > 1:
                raise ValidationError(
                    f"Single-choice question '{question_in.text}' has more than one correct option."
                )

        try:
            new_exam = crud_exam.create(
                db,
                obj_in={
                    "title": exam_in.title,
                    "description": exam_in.description,
                    "application_date": exam_in.application_date,
                    "status": exam_in.status,
                    "revision": 1,
                },
                commit=False,
            )
            self.apply_evaluators(db, new_exam, exam_in.evaluator_ids)
            for station_in in exam_in.stations:
                self.insert_station_tree(db, new_exam, station_in)
            crud_station.recompute_max_scores(db, exam_id=new_exam.id)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Exam creation failed, transaction rolled back", exc_info=True)
            raise

        logger.info(f"Exam {new_exam.id} created with {len(exam_in.stations)} stations")
        return crud_exam.get_with_graph(db, id=new_exam.id)


exam_sync_service = ExamSyncService()
