import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("TESTING", "true")

import pytest
import uuid
from datetime import date
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from app.core.config import settings
from tests.helpers.payloads import checklist_station
from app.core.database import Base, build_engine, get_db
from app.crud.evaluator import evaluator as crud_evaluator
from app.crud.student import student as crud_student
from app.schemas.exam import ExamCreate
from app.schemas.exam_session import ExamSessionCreate
from app.services.exam_session import exam_session_service
from app.services.exam_sync import exam_sync_service
from app.utils import deps as deps_utils
import main

test_db_url = settings.TEST_DATABASE_URL or "sqlite://"

@pytest.fixture(scope="function")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = build_engine(test_db_url, poolclass=StaticPool)
    else:
        engine = build_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def evaluator_factory(db_session):
    def _evaluator_factory(first_name="Ana", last_name="Gomez"):
        return crud_evaluator.create(db_session, obj_in={
            "first_name": first_name,
            "last_name": last_name,
            "email": f"evaluator-{uuid.uuid4().hex[:8]}@test.com",
            "specialty": "Internal Medicine",
        })
    return _evaluator_factory

@pytest.fixture
def student_factory(db_session):
    def _student_factory(first_name="Luis", last_name="Perez"):
        return crud_student.create(db_session, obj_in={
            "first_name": first_name,
            "last_name": last_name,
            "document_number": uuid.uuid4().hex[:10],
        })
    return _student_factory


@pytest.fixture
def exam_factory(db_session):
    def _exam_factory(title="OSCE Cardiology", stations=None, evaluator_ids=None, application_date=None):
        exam_in = ExamCreate.model_validate({
            "title": title,
            "applicationDate": (application_date or date(2025, 11, 20)).isoformat(),
            "evaluatorIds": evaluator_ids or [],
            "stations": stations if stations is not None else [checklist_station()],
        })
        return exam_sync_service.create(db_session, exam_in)
    return _exam_factory

@pytest.fixture
def session_factory(db_session, evaluator_factory, student_factory):
    def _session_factory(exam, start=True):
        session = exam_session_service.assign(db_session, ExamSessionCreate(
            exam_id=exam.id,
            student_id=student_factory().id,
            evaluator_id=evaluator_factory().id,
        ))
        if start:
            session = exam_session_service.start(db_session, session.id)
        return session
    return _session_factory
