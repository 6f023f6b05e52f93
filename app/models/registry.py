# Imported wherever the full mapper graph must be configured (app startup,
# metadata creation in tests and migrations).
from app.core.database import Base
from app.models.exam import Exam, exam_evaluators_association
from app.models.station import Station
from app.models.question import Question
from app.models.option import Option
from app.models.evaluator import Evaluator
from app.models.student import Student
from app.models.exam_session import ExamSession
from app.models.answer import Answer
from app.models.station_result import StationResult

__all__ = [
    "Base",
    "Exam",
    "exam_evaluators_association",
    "Station",
    "Question",
    "Option",
    "Evaluator",
    "Student",
    "ExamSession",
    "Answer",
    "StationResult",
]
