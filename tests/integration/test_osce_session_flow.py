from fastapi.testclient import TestClient

from tests.helpers.payloads import checklist_station, choice_station
from tests.helpers.asserts import api_call


def test_full_osce_session_flow(client: TestClient, student_factory, evaluator_factory):
    """
    Build an exam over HTTP, run one student through every station and read the results.
    """
    print("\n[TEST] Full OSCE session flow")

    evaluator = evaluator_factory()
    student = student_factory()

    print("[1] Creating exam with a checklist station and a multi-choice station")
    r_exam = api_call(client, "POST", "/exams/", json={
        "title": "OSCE Emergency",
        "applicationDate": "2025-11-20",
        "evaluatorIds": [evaluator.id],
        "stations": [checklist_station(weights=(2.0, 3.0)), choice_station(weight=4.0)],
    })
    exam = r_exam.json()["data"]
    checklist, choice = exam["stations"]
    print("[OK] Exam created")

    print("[2] Assigning and starting the session")
    r_session = api_call(client, "POST", "/sessions/", json={
        "examId": exam["id"], "studentId": student.id, "evaluatorId": evaluator.id
    })
    session_id = r_session.json()["data"]["id"]
    api_call(client, "POST", f"/sessions/{session_id}/start")
    print("[OK] Session in progress")

    print("[3] Early finalize is rejected")
    r_early = client.post(f"/sessions/{session_id}/finalize", json={})
    assert r_early.status_code == 400
    assert r_early.json()["error"]["details"]["missing_station_ids"] == [checklist["id"], choice["id"]]

    print("[4] Answering the checklist station in one batch")
    api_call(client, "PUT", f"/sessions/{session_id}/answers/batch", json={"answers": [
        {"questionId": checklist["questions"][0]["id"], "text": "yes"},
        {"questionId": checklist["questions"][1]["id"], "text": "parcial"},
    ]})
    r_station = api_call(client, "POST", f"/sessions/{session_id}/stations/{checklist['id']}/complete",
                         json={"observations": "Clear history"})
    assert r_station.json()["data"]["score"] == 3.5

    print("[5] Answering the choice station")
    correct_ids = [o["id"] for o in choice["questions"][0]["options"] if o["isCorrect"]]
    r_answer = api_call(client, "PUT", f"/sessions/{session_id}/answers", json={
        "questionId": choice["questions"][0]["id"], "selectedOptionIds": correct_ids
    })
    assert r_answer.json()["data"]["awardedScore"] == 4.0
    api_call(client, "POST", f"/sessions/{session_id}/stations/{choice['id']}/complete")

    print("[6] Finalizing twice")
    r_final = api_call(client, "POST", f"/sessions/{session_id}/finalize", json={"observations": "Well done"})
    final = r_final.json()["data"]
    assert final["status"] == "completed"
    assert final["grade"] == 3.75
    r_again = api_call(client, "POST", f"/sessions/{session_id}/finalize")
    assert r_again.json()["data"]["grade"] == 3.75
    assert r_again.json()["message"] == "Exam session was already finalized"

    print("[7] Reading results")
    results = api_call(client, "GET", f"/sessions/{session_id}").json()["data"]
    assert results["totalScore"] == 7.5
    assert results["maxScore"] == 9.0
    assert [s["score"] for s in results["stations"]] == [3.5, 4.0]
    assert len(results["answers"]) == 3

    print("[8] Answered exam can no longer drop its stations")
    exam_now = api_call(client, "GET", f"/exams/{exam['id']}").json()["data"]
    r_sync = client.put(f"/exams/{exam['id']}", json={
        **exam_now, "stations": [exam_now["stations"][0]], "removedStationIds": [choice["id"]]
    })
    assert r_sync.status_code == 409
    assert r_sync.json()["error"]["details"] == {"station_ids": [choice["id"]]}
    print("[OK] Flow complete")
