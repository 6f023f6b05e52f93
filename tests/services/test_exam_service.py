import inspect
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

from app.core import scheduler
from app.core.constants import ExamStatusEnum
from app.core.exceptions import NotFoundError, ReferentialIntegrityError
from app.crud.exam import exam as crud_exam
from app.services.exam import exam_service
from tests.helpers.payloads import choice_station
from tests.helpers.queries import options_of_exam


class TestExamService:
    def test_delete_removes_whole_graph(self, db_session, exam_factory):
        exam = exam_factory(stations=[choice_station()])
        exam_id = exam.id

        assert exam_service.delete_exam(db_session, exam_id) == exam_id
        assert crud_exam.get(db_session, id=exam_id) is None
        assert options_of_exam(db_session, exam_id) == []

    def test_delete_blocked_by_sessions(self, db_session, exam_factory, session_factory):
        exam = exam_factory()
        session_factory(exam, start=False)
        with pytest.raises(ReferentialIntegrityError):
            exam_service.delete_exam(db_session, exam.id)
        assert crud_exam.get(db_session, id=exam.id) is not None

    def test_get_missing_exam(self, db_session):
        with pytest.raises(NotFoundError):
            exam_service.get_exam(db_session, 404)

    def test_deactivate_past_exams(self, db_session, exam_factory):
        past = exam_factory(title="Past", application_date=date(2025, 1, 10))
        today = exam_factory(title="Today", application_date=date(2025, 6, 1))
        future = exam_factory(title="Future", application_date=date(2025, 9, 1))

        deactivated = exam_service.deactivate_past_exams(db_session, today=date(2025, 6, 1))

        assert deactivated == [past.id]
        assert crud_exam.get(db_session, id=past.id).status == ExamStatusEnum.INACTIVE
        assert crud_exam.get(db_session, id=today.id).status == ExamStatusEnum.ACTIVE
        assert crud_exam.get(db_session, id=future.id).status == ExamStatusEnum.ACTIVE
        assert exam_service.deactivate_past_exams(db_session, today=date(2025, 6, 1)) == []

    def test_status_filter(self, db_session, exam_factory):
        exam_factory(title="Active")
        exam_factory(title="Past", application_date=date(2020, 1, 1))
        exam_service.deactivate_past_exams(db_session, today=date(2021, 1, 1))

        active = exam_service.get_all_exams(db_session, status=ExamStatusEnum.ACTIVE)
        assert [e.title for e in active] == ["Active"]


class TestExamStatusJob:
    def test_job_runs_in_its_own_session(self, db_session, database_engine, exam_factory, monkeypatch):
        past = exam_factory(title="Past", application_date=date(2020, 1, 1))
        monkeypatch.setattr(scheduler, "SessionLocal", sessionmaker(bind=database_engine))

        assert not inspect.iscoroutinefunction(scheduler.deactivate_past_exams)
        scheduler.deactivate_past_exams()

        db_session.expire_all()
        assert crud_exam.get(db_session, id=past.id).status == ExamStatusEnum.INACTIVE
