from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import date, datetime

from app.core.constants import ExamStatusEnum, QuestionTypeEnum
from app.schemas.response import CamelModel

ORM_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

# Desired graph (input). A node without ``id`` is new; removed nodes are listed
# in the exam-level removal arrays.

class OptionIn(CamelModel):
    id: Optional[int] = None
    text: str
    is_correct: bool = False
    order: int = 0

class QuestionIn(CamelModel):
    id: Optional[int] = None
    text: str
    type: QuestionTypeEnum
    required: bool = True
    order: int = 0
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    score_weight: float = Field(default=1.0, ge=0)
    options: List[OptionIn] = []

class StationIn(CamelModel):
    id: Optional[int] = None
    title: str
    description: Optional[str] = None
    duration_minutes: int = Field(default=15, ge=0)
    order: int = 0
    active: bool = True
    questions: List[QuestionIn] = []

class ExamCreate(CamelModel):
    title: str
    description: Optional[str] = None
    application_date: Optional[date] = None
    status: ExamStatusEnum = ExamStatusEnum.ACTIVE
    evaluator_ids: List[int] = []
    stations: List[StationIn] = []

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "OSCE Internal Medicine",
                "description": "End of rotation practical exam",
                "applicationDate": "2025-11-20",
                "status": "active",
                "evaluatorIds": [1],
                "stations": [
                    {
                        "title": "History taking",
                        "durationMinutes": 10,
                        "order": 1,
                        "active": True,
                        "questions": [
                            {"text": "Introduces self", "type": "listing", "order": 1, "scoreWeight": 2},
                        ],
                    }
                ],
            }
        },
    )

class ExamSync(ExamCreate):
    revision: Optional[int] = None
    removed_station_ids: List[int] = []
    removed_question_ids: List[int] = []
    removed_option_ids: List[int] = []

# Persisted graph (output)

class Option(CamelModel):
    id: int
    text: str
    is_correct: bool
    order: int

    model_config = ORM_CONFIG

class Question(CamelModel):
    id: int
    text: str
    type: QuestionTypeEnum = Field(validation_alias="question_type")
    required: bool
    order: int
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    score_weight: float
    options: List[Option] = []

    model_config = ORM_CONFIG

class Station(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    duration_minutes: int
    order: int
    active: bool
    max_score: float
    questions: List[Question] = []

    model_config = ORM_CONFIG

class Exam(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    application_date: Optional[date] = None
    status: ExamStatusEnum
    revision: int
    evaluator_ids: List[int] = []
    stations: List[Station] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ORM_CONFIG

class ExamSummary(CamelModel):
    id: int
    title: str
    application_date: Optional[date] = None
    status: ExamStatusEnum
    revision: int

    model_config = ORM_CONFIG

class ExamDuplicateRequest(CamelModel):
    application_date: date

class ExamBatchDuplicateRequest(CamelModel):
    exam_ids: List[int] = Field(..., min_length=1)
    application_date: date

class ExamDuplicateResult(CamelModel):
    new_exam_ids: List[int]

class ExamDeactivationResult(CamelModel):
    deactivated_exam_ids: List[int]
