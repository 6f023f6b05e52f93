from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime

from app.core.constants import SessionStatusEnum
from app.schemas.response import CamelModel

ORM_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class ExamSessionCreate(CamelModel):
    exam_id: int
    student_id: int
    evaluator_id: int

class ExamSession(CamelModel):
    id: int
    exam_id: int
    student_id: int
    evaluator_id: int
    status: SessionStatusEnum
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    grade: Optional[float] = None
    observations: Optional[str] = None

    model_config = ORM_CONFIG

class AnswerResponse(CamelModel):
    """Response payload for one question.

    ``text`` carries free text or a checklist value (yes/partially/no),
    ``selected_option_ids`` the chosen options of a choice question and
    ``value`` a numeric scale reading. ``awarded_score`` is the evaluator's
    override for free-text and numeric-scale questions.
    """
    text: Optional[str] = None
    selected_option_ids: Optional[List[int]] = None
    value: Optional[float] = None
    awarded_score: Optional[float] = None
    comment: Optional[str] = None

class AnswerSubmit(AnswerResponse):
    question_id: int

class AnswerBatchSubmit(CamelModel):
    answers: List[AnswerSubmit] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_unique_questions(self):
        question_ids = [a.question_id for a in self.answers]
        if len(question_ids) != len(set(question_ids)):
            raise ValueError("Duplicate questionIds found in submission.")
        return self

class Answer(CamelModel):
    id: int
    session_id: int
    question_id: int
    response_text: Optional[str] = None
    selected_option_ids: Optional[List[int]] = None
    response_value: Optional[float] = None
    awarded_score: Optional[float] = None
    comment: Optional[str] = None
    answered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ORM_CONFIG

class StationCompleteRequest(CamelModel):
    observations: Optional[str] = None

class StationResult(CamelModel):
    id: int
    session_id: int
    station_id: int
    score: float
    observations: Optional[str] = None
    evaluated_at: datetime

    model_config = ORM_CONFIG

class FinalizeRequest(CamelModel):
    observations: Optional[str] = None

class StationScore(CamelModel):
    station_id: int
    title: str
    order: int
    score: Optional[float] = None
    max_score: float
    observations: Optional[str] = None
    evaluated_at: Optional[datetime] = None

class SessionResults(CamelModel):
    session: ExamSession
    exam_title: str
    stations: List[StationScore] = []
    answers: List[Answer] = []
    total_score: float
    max_score: float
