from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.schemas.exam_session import AnswerSubmit
from app.services.exam_session import exam_session_service
from tests.helpers.payloads import checklist_station, choice_station
from tests.helpers.asserts import api_call


EXAM_PAYLOAD = {
    "title": "OSCE Pediatrics",
    "description": "Final rotation exam",
    "applicationDate": "2025-11-20",
    "stations": [checklist_station(weights=(2.0, 3.0)), choice_station(weight=4.0)],
}


class TestExamEndpoints:
    def test_create_exam(self, client: TestClient, evaluator_factory):
        evaluator = evaluator_factory()
        response = api_call(client, "POST", "/exams/", json={**EXAM_PAYLOAD, "evaluatorIds": [evaluator.id]})
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["revision"] == 1
        assert data["evaluatorIds"] == [evaluator.id]
        assert [s["maxScore"] for s in data["stations"]] == [5.0, 4.0]
        assert data["stations"][1]["questions"][0]["type"] == "multi_choice"

    def test_get_all_exams(self, client: TestClient, exam_factory):
        exam_factory(title="First")
        response = api_call(client, "GET", "/exams/?status=active")
        titles = [e["title"] for e in response.json()["data"]]
        assert titles == ["First"]

    def test_get_exam(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = api_call(client, "GET", f"/exams/{exam.id}")
        assert response.json()["data"]["id"] == exam.id
        assert response.headers["X-Request-ID"]

    def test_get_missing_exam_returns_error_envelope(self, client: TestClient):
        response = client.get("/exams/404")
        assert response.status_code == 404
        body = response.json()
        assert body["error"]["errorKind"] == "NotFoundError"
        assert body["error"]["details"] == {"exam_id": 404}
        assert body["path"] == "/exams/404"
        assert body["requestId"]
        assert response.headers["X-Request-ID"] == body["requestId"]

    def test_update_exam(self, client: TestClient, exam_factory):
        exam = exam_factory()
        payload = api_call(client, "GET", f"/exams/{exam.id}").json()["data"]
        payload["title"] = "Renamed"
        payload["stations"][0]["questions"][0]["scoreWeight"] = 5.0

        response = api_call(client, "PUT", f"/exams/{exam.id}", json=payload)

        data = response.json()["data"]
        assert data["title"] == "Renamed"
        assert data["revision"] == 2
        assert data["stations"][0]["maxScore"] == 8.0

    def test_update_with_stale_revision_is_conflict(self, client: TestClient, exam_factory):
        exam = exam_factory()
        payload = api_call(client, "GET", f"/exams/{exam.id}").json()["data"]
        api_call(client, "PUT", f"/exams/{exam.id}", json={**payload, "title": "First"})

        response = client.put(f"/exams/{exam.id}", json={**payload, "title": "Second"})

        assert response.status_code == 409
        assert response.json()["error"]["errorKind"] == "ConflictError"

    def test_removing_answered_question_is_blocked(self, client: TestClient, db_session: Session,
                                                   exam_factory, session_factory):
        exam = exam_factory()
        question_id = exam.stations[0].questions[0].id
        session = session_factory(exam)
        exam_session_service.submit_answer(db_session, session.id, AnswerSubmit(question_id=question_id, text="yes"))

        payload = api_call(client, "GET", f"/exams/{exam.id}").json()["data"]
        payload["stations"][0]["questions"] = payload["stations"][0]["questions"][1:]
        payload["removedQuestionIds"] = [question_id]
        response = client.put(f"/exams/{exam.id}", json=payload)

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["errorKind"] == "ReferentialIntegrityError"
        assert error["details"] == {"question_ids": [question_id]}

    def test_delete_exam(self, client: TestClient, exam_factory):
        exam = exam_factory()
        response = api_call(client, "DELETE", f"/exams/{exam.id}")
        assert response.json()["data"] == exam.id
        assert client.get(f"/exams/{exam.id}").status_code == 404

    def test_duplicate_exam(self, client: TestClient, exam_factory):
        exam = exam_factory(stations=[choice_station()])
        response = api_call(client, "POST", f"/exams/{exam.id}/duplicate", json={"applicationDate": "2026-03-05"})
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] != exam.id
        assert data["title"] == "OSCE Cardiology (05/03/2026)"
        assert data["status"] == "active"

    def test_duplicate_many(self, client: TestClient, exam_factory):
        first = exam_factory(title="First")
        second = exam_factory(title="Second")
        response = api_call(
            client, "POST", "/exams/duplicate",
            json={"examIds": [first.id, second.id], "applicationDate": "2026-03-05"}
        )
        new_ids = response.json()["data"]["newExamIds"]
        assert len(new_ids) == 2
        assert not set(new_ids) & {first.id, second.id}

    def test_duplicate_many_requires_ids(self, client: TestClient):
        response = client.post("/exams/duplicate", json={"examIds": [], "applicationDate": "2026-03-05"})
        assert response.status_code == 422
        assert response.json()["error"]["errorKind"] == "ValidationError"

    def test_deactivate_past(self, client: TestClient, exam_factory):
        from datetime import date
        past = exam_factory(title="Past", application_date=date(2020, 5, 1))
        response = api_call(client, "POST", "/exams/deactivate-past")
        assert response.json()["data"]["deactivatedExamIds"] == [past.id]
