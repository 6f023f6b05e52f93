from typing import List
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.exam_session import (
    Answer,
    AnswerBatchSubmit,
    AnswerSubmit,
    ExamSession,
    ExamSessionCreate,
    FinalizeRequest,
    SessionResults,
    StationCompleteRequest,
    StationResult,
)
from app.services.exam_session import exam_session_service

router = APIRouter()

@router.post("/", response_model=APIResponse[ExamSession], status_code=status.HTTP_201_CREATED)
async def assign_session(
    *,
    db: Session = Depends(deps.get_transactional_db),
    session_in: ExamSessionCreate
):
    session = exam_session_service.assign(db, session_in=session_in)
    return APIResponse(message="Student assigned to exam successfully", data=ExamSession.model_validate(session))


@router.get("/", response_model=APIResponse[List[ExamSession]])
async def get_exam_sessions(
    db: Session = Depends(deps.get_db),
    exam_id: int = Query(..., alias="examId"),
    skip: int = 0,
    limit: int = 100
):
    sessions = exam_session_service.list_sessions(db, exam_id=exam_id, skip=skip, limit=limit)
    return APIResponse(message="Exam sessions retrieved successfully", data=[ExamSession.model_validate(s) for s in sessions])


@router.get("/{session_id}", response_model=APIResponse[SessionResults])
async def get_session_results(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int
):
    results = exam_session_service.get_session_results(db, session_id=session_id)
    return APIResponse(message="Session results retrieved successfully", data=results)


@router.post("/{session_id}/start", response_model=APIResponse[ExamSession])
async def start_session(
    *,
    db: Session = Depends(deps.get_transactional_db),
    session_id: int
):
    session = exam_session_service.start(db, session_id=session_id)
    return APIResponse(message="Exam session started successfully", data=ExamSession.model_validate(session))


@router.put("/{session_id}/answers", response_model=APIResponse[Answer])
async def submit_answer(
    *,
    db: Session = Depends(deps.get_transactional_db),
    session_id: int,
    answer_in: AnswerSubmit
):
    answer = exam_session_service.submit_answer(db, session_id=session_id, answer_in=answer_in)
    return APIResponse(message="Answer saved successfully", data=Answer.model_validate(answer))


@router.put("/{session_id}/answers/batch", response_model=APIResponse[List[Answer]])
async def submit_answers(
    *,
    db: Session = Depends(deps.get_transactional_db),
    session_id: int,
    batch_in: AnswerBatchSubmit
):
    answers = exam_session_service.submit_answers(db, session_id=session_id, batch=batch_in)
    return APIResponse(message="Answers saved successfully", data=[Answer.model_validate(a) for a in answers])


@router.post("/{session_id}/stations/{station_id}/complete", response_model=APIResponse[StationResult])
async def complete_station(
    *,
    db: Session = Depends(deps.get_transactional_db),
    session_id: int,
    station_id: int,
    complete_in: StationCompleteRequest = StationCompleteRequest()
):
    result = exam_session_service.complete_station(
        db, session_id=session_id, station_id=station_id, observations=complete_in.observations
    )
    return APIResponse(message="Station completed successfully", data=StationResult.model_validate(result))


@router.post("/{session_id}/finalize", response_model=APIResponse[ExamSession])
async def finalize_session(
    *,
    db: Session = Depends(deps.get_transactional_db),
    session_id: int,
    finalize_in: FinalizeRequest = FinalizeRequest()
):
    session, finalized = exam_session_service.finalize(db, session_id=session_id, observations=finalize_in.observations)
    message = "Exam session finalized successfully" if finalized else "Exam session was already finalized"
    return APIResponse(message=message, data=ExamSession.model_validate(session))
