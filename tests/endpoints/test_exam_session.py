from fastapi.testclient import TestClient

from tests.helpers.asserts import api_call


class TestExamSessionEndpoints:
    def test_assign_session(self, client: TestClient, exam_factory, student_factory, evaluator_factory):
        exam = exam_factory()
        payload = {"examId": exam.id, "studentId": student_factory().id, "evaluatorId": evaluator_factory().id}

        response = api_call(client, "POST", "/sessions/", json=payload)
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "pending"

        duplicate = client.post("/sessions/", json=payload)
        assert duplicate.status_code == 409

    def test_list_sessions_by_exam(self, client: TestClient, exam_factory, session_factory):
        exam = exam_factory()
        session = session_factory(exam, start=False)
        response = api_call(client, "GET", f"/sessions/?examId={exam.id}")
        assert [s["id"] for s in response.json()["data"]] == [session.id]

    def test_start_session(self, client: TestClient, exam_factory, session_factory):
        session = session_factory(exam_factory(), start=False)
        response = api_call(client, "POST", f"/sessions/{session.id}/start")
        data = response.json()["data"]
        assert data["status"] == "in_progress"
        assert data["startTime"]

    def test_answer_before_start_is_conflict(self, client: TestClient, exam_factory, session_factory):
        exam = exam_factory()
        session = session_factory(exam, start=False)
        response = client.put(
            f"/sessions/{session.id}/answers",
            json={"questionId": exam.stations[0].questions[0].id, "text": "yes"}
        )
        assert response.status_code == 409
        assert response.json()["error"]["errorKind"] == "ConflictError"

    def test_complete_station_with_missing_answers(self, client: TestClient, exam_factory, session_factory):
        exam = exam_factory()
        session = session_factory(exam)
        station = exam.stations[0]
        response = client.post(f"/sessions/{session.id}/stations/{station.id}/complete", json={})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["errorKind"] == "IncompleteStationError"
        assert error["details"]["missing_question_ids"] == [q.id for q in station.questions]

    def test_batch_answers_reject_duplicate_questions(self, client: TestClient, exam_factory, session_factory):
        exam = exam_factory()
        session = session_factory(exam)
        question_id = exam.stations[0].questions[0].id
        response = client.put(
            f"/sessions/{session.id}/answers/batch",
            json={"answers": [{"questionId": question_id, "text": "yes"}, {"questionId": question_id, "text": "no"}]}
        )
        assert response.status_code == 422
