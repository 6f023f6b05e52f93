from typing import List, Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from app.core.constants import ExamStatusEnum

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.exam import (
    Exam,
    ExamBatchDuplicateRequest,
    ExamCreate,
    ExamDeactivationResult,
    ExamDuplicateRequest,
    ExamDuplicateResult,
    ExamSummary,
    ExamSync,
)
from app.services.exam import exam_service
from app.services.exam_duplication import exam_duplication_service

router = APIRouter()

@router.post("/", response_model=APIResponse[Exam], status_code=status.HTTP_201_CREATED)
async def create_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_in: ExamCreate
):
    new_exam = exam_service.create_exam(db, exam_in=exam_in)
    return APIResponse(message="Exam created successfully", data=Exam.model_validate(new_exam))


@router.get("/", response_model=APIResponse[List[ExamSummary]])
async def get_all_exams(
    db: Session = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    exam_status: Optional[ExamStatusEnum] = Query(None, alias="status")
):
    exams = exam_service.get_all_exams(db, skip=skip, limit=limit, status=exam_status)
    return APIResponse(message="Exams retrieved successfully", data=[ExamSummary.model_validate(e) for e in exams])


@router.post("/duplicate", response_model=APIResponse[ExamDuplicateResult], status_code=status.HTTP_201_CREATED)
async def duplicate_exams(
    *,
    db: Session = Depends(deps.get_transactional_db),
    duplicate_in: ExamBatchDuplicateRequest
):
    new_exam_ids = exam_duplication_service.duplicate(
        db, exam_ids=duplicate_in.exam_ids, application_date=duplicate_in.application_date
    )
    return APIResponse(message="Exams duplicated successfully", data=ExamDuplicateResult(new_exam_ids=new_exam_ids))


@router.post("/deactivate-past", response_model=APIResponse[ExamDeactivationResult])
async def deactivate_past_exams(
    db: Session = Depends(deps.get_transactional_db)
):
    exam_ids = exam_service.deactivate_past_exams(db)
    return APIResponse(
        message="Past exams deactivated successfully",
        data=ExamDeactivationResult(deactivated_exam_ids=exam_ids)
    )


@router.get("/{exam_id}", response_model=APIResponse[Exam])
async def get_exam(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int
):
    exam = exam_service.get_exam(db, exam_id=exam_id)
    return APIResponse(message="Exam retrieved successfully", data=Exam.model_validate(exam))


@router.put("/{exam_id}", response_model=APIResponse[Exam])
async def update_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    exam_in: ExamSync
):
    updated_exam = exam_service.update_exam(db, exam_id=exam_id, exam_in=exam_in)
    return APIResponse(message="Exam updated successfully", data=Exam.model_validate(updated_exam))


@router.delete("/{exam_id}", response_model=APIResponse[int])
async def delete_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int
):
    deleted_exam_id = exam_service.delete_exam(db, exam_id=exam_id)
    return APIResponse(message="Exam deleted successfully", data=deleted_exam_id)


@router.post("/{exam_id}/duplicate", response_model=APIResponse[Exam], status_code=status.HTTP_201_CREATED)
async def duplicate_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    duplicate_in: ExamDuplicateRequest
):
    new_exam = exam_duplication_service.duplicate_exam(db, exam_id=exam_id, application_date=duplicate_in.application_date)
    return APIResponse(message="Exam duplicated successfully", data=Exam.model_validate(new_exam))
