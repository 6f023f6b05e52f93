import pytest

from app.core.constants import QuestionTypeEnum
from app.core.exceptions import ValidationError
from app.models.option import Option
from app.models.question import Question
from app.schemas.exam_session import AnswerResponse
from app.services.scoring import scoring_service


def make_question(question_type, weight=2.0, options=(), min_value=None, max_value=None):
    return Question(
        id=1,
        text="Question",
        question_type=question_type,
        score_weight=weight,
        min_value=min_value,
        max_value=max_value,
        options=[Option(id=i, text=text, is_correct=correct, order=i) for i, (text, correct) in enumerate(options, start=1)],
    )


class TestChecklistScoring:
    @pytest.mark.parametrize("raw,expected", [
        ("yes", 2.0), ("Si", 2.0), ("partially", 1.0), ("Parcialmente", 1.0), ("no", 0.0), (None, 0.0),
    ])
    def test_listing_credit(self, raw, expected):
        question = make_question(QuestionTypeEnum.LISTING)
        assert scoring_service.score_answer(question, AnswerResponse(text=raw)) == expected

    def test_listing_rejects_unknown_value(self):
        question = make_question(QuestionTypeEnum.LISTING)
        with pytest.raises(ValidationError):
            scoring_service.score_answer(question, AnswerResponse(text="maybe"))

    def test_listing_scored_from_selected_option(self):
        question = make_question(QuestionTypeEnum.LISTING, weight=4.0, options=[("Yes", False), ("Partially", False), ("No", False)])
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[2])) == 2.0


class TestChoiceScoring:
    def test_multi_choice_exact_match(self):
        question = make_question(QuestionTypeEnum.MULTI_CHOICE, weight=4.0, options=[("A", True), ("B", True), ("C", False)])
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[1, 2])) == 4.0

    def test_multi_choice_partial_selection_scores_zero(self):
        question = make_question(QuestionTypeEnum.MULTI_CHOICE, weight=4.0, options=[("A", True), ("B", True), ("C", False)])
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[1])) == 0.0
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[1, 2, 3])) == 0.0

    def test_single_choice_correct_and_wrong_option(self):
        question = make_question(QuestionTypeEnum.SINGLE_CHOICE, weight=3.0, options=[("A", True), ("B", False)])
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[1])) == 3.0
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[2])) == 0.0

    def test_empty_selection_scores_zero(self):
        question = make_question(QuestionTypeEnum.SINGLE_CHOICE, options=[("A", True), ("B", False)])
        assert scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[])) == 0.0

    def test_single_choice_rejects_two_selections(self):
        question = make_question(QuestionTypeEnum.SINGLE_CHOICE, options=[("A", True), ("B", False)])
        with pytest.raises(ValidationError):
            scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[1, 2]))

    def test_unknown_option_is_rejected(self):
        question = make_question(QuestionTypeEnum.SINGLE_CHOICE, options=[("A", True)])
        with pytest.raises(ValidationError) as exc_info:
            scoring_service.score_answer(question, AnswerResponse(selected_option_ids=[99]))
        assert exc_info.value.details["option_ids"] == [99]


class TestEvaluatorScoring:
    def test_free_text_without_override_awaits_evaluator(self):
        question = make_question(QuestionTypeEnum.FREE_TEXT)
        assert scoring_service.score_answer(question, AnswerResponse(text="Chest pain")) is None

    def test_free_text_override_within_weight(self):
        question = make_question(QuestionTypeEnum.FREE_TEXT, weight=3.0)
        assert scoring_service.score_answer(question, AnswerResponse(text="ok", awarded_score=2.5)) == 2.5

    def test_override_above_weight_is_rejected(self):
        question = make_question(QuestionTypeEnum.FREE_TEXT, weight=3.0)
        with pytest.raises(ValidationError):
            scoring_service.score_answer(question, AnswerResponse(text="ok", awarded_score=3.5))

    def test_numeric_scale_bounds(self):
        question = make_question(QuestionTypeEnum.NUMERIC_SCALE, weight=5.0, min_value=1, max_value=5)
        assert scoring_service.score_answer(question, AnswerResponse(value=4, awarded_score=4)) == 4.0
        with pytest.raises(ValidationError):
            scoring_service.score_answer(question, AnswerResponse(value=6))


class TestAggregates:
    def test_station_score_ignores_unscored_and_clamps(self):
        assert scoring_service.station_score([2.0, None, 1.0], 5.0) == 3.0
        assert scoring_service.station_score([4.0, 4.0], 5.0) == 5.0

    def test_overall_grade_is_mean(self):
        assert scoring_service.overall_grade([8.0, 6.0]) == 7.0

    def test_overall_grade_needs_results(self):
        with pytest.raises(ValidationError):
            scoring_service.overall_grade([])
