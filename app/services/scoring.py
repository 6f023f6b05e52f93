from typing import Iterable, List, Optional, Set

from app.core.constants import (
    CHECKLIST_RESPONSE_ALIASES,
    PARTIAL_CREDIT_RATIO,
    ChecklistResponseEnum,
    QuestionTypeEnum,
)
from app.core.exceptions import ValidationError
from app.models.question import Question
from app.schemas.exam_session import AnswerResponse


class ScoringService:
    """Per-question credit, station score and overall grade.

    Pure computations over already loaded entities; nothing here touches the
    database session.
    """

    def normalize_checklist_value(self, raw: Optional[str]) -> Optional[ChecklistResponseEnum]:
        if raw is None or not raw.strip():
            return None
        value = CHECKLIST_RESPONSE_ALIASES.get(raw.strip().lower())
        if value is None:
            raise ValidationError(
                f"'{raw}' is not a valid checklist response; expected yes, partially or no.",
                details={"allowed": [v.value for v in ChecklistResponseEnum]},
            )
        return value

    def _selected_ids(self, question: Question, response: AnswerResponse) -> Set[int]:
        selected = set(response.selected_option_ids or [])
        known = {o.id for o in question.options}
        unknown = sorted(selected - known)
        if unknown:
            raise ValidationError(
                "Selected options do not belong to the question.",
                details={"question_id": question.id, "option_ids": unknown},
            )
        return selected

    def _score_checklist(self, question: Question, response: AnswerResponse) -> float:
        raw = response.text
        if response.selected_option_ids:
            # Checklist items may be modelled with yes/partially/no options
            selected = self._selected_ids(question, response)
            if len(selected) > 1:
                raise ValidationError(
                    "A checklist question accepts a single response.",
                    details={"question_id": question.id},
                )
            option_texts = {o.id: o.text for o in question.options}
            raw = option_texts[next(iter(selected))]

        value = self.normalize_checklist_value(raw)
        if value == ChecklistResponseEnum.YES:
            return float(question.score_weight)
        if value == ChecklistResponseEnum.PARTIALLY:
            return float(question.score_weight) * PARTIAL_CREDIT_RATIO
        return 0.0

    def _score_choice(self, question: Question, response: AnswerResponse) -> float:
        selected = self._selected_ids(question, response)
        if question.question_type == QuestionTypeEnum.SINGLE_CHOICE and len(selected) > 1:
            raise ValidationError(
                "A single-choice question accepts at most one selected option.",
                details={"question_id": question.id},
            )
        if not selected:
            return 0.0
        return float(question.score_weight) if selected == question.correct_option_ids else 0.0

    def _evaluator_score(self, question: Question, response: AnswerResponse) -> Optional[float]:
        if question.question_type == QuestionTypeEnum.NUMERIC_SCALE and response.value is not None:
            if question.min_value is not None and response.value < question.min_value:
                raise ValidationError(
                    f"Value {response.value} is below the minimum of {question.min_value}.",
                    details={"question_id": question.id},
                )
            if question.max_value is not None and response.value > question.max_value:
                raise ValidationError(
                    f"Value {response.value} is above the maximum of {question.max_value}.",
                    details={"question_id": question.id},
                )

        if response.awarded_score is None:
            return None
        if response.awarded_score < 0 or response.awarded_score > question.score_weight:
            raise ValidationError(
                f"Awarded score must be between 0 and {question.score_weight}.",
                details={"question_id": question.id, "awarded_score": response.awarded_score},
            )
        return float(response.awarded_score)

    def score_answer(self, question: Question, response: AnswerResponse) -> Optional[float]:
        """Credit for one answer, or None when it awaits an evaluator score."""
        if question.question_type == QuestionTypeEnum.LISTING:
            return self._score_checklist(question, response)
        if question.question_type in (QuestionTypeEnum.SINGLE_CHOICE, QuestionTypeEnum.MULTI_CHOICE):
            return self._score_choice(question, response)
        return self._evaluator_score(question, response)

    def station_score(self, awarded_scores: Iterable[Optional[float]], max_score: float) -> float:
        total = sum(score for score in awarded_scores if score is not None)
        return min(max(total, 0.0), max_score)

    def overall_grade(self, station_scores: List[float]) -> float:
        if not station_scores:
            raise ValidationError("An overall grade needs at least one station result.")
        return sum(station_scores) / len(station_scores)


scoring_service = ScoringService()
