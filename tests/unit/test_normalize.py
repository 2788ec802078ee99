# =============================================================================
# TESTS - Payload unwrapping and question defaults
# =============================================================================

import pytest

from smartquiz.models import Question, Quiz
from smartquiz.normalize import QUESTION_TEXT_MISSING, normalize_question, unwrap_questions


class TestUnwrapQuestions:

    def test_bare_list(self, arithmetic_question):
        assert unwrap_questions([arithmetic_question]) == [arithmetic_question]

    def test_wrapped_under_questions(self, arithmetic_question):
        assert unwrap_questions({"questions": [arithmetic_question]}) == [arithmetic_question]

    def test_wrapped_under_quiz(self, arithmetic_question):
        assert unwrap_questions({"quiz": [arithmetic_question]}) == [arithmetic_question]

    def test_quiz_model(self, arithmetic_question):
        quiz = Quiz(questions=[arithmetic_question])

        assert unwrap_questions(quiz) == list(quiz.questions)

    @pytest.mark.parametrize("payload", [
        {"questions": "not a list"},
        {"data": []},
        "questions",
        42,
        None,
    ])
    def test_unrecognised_shapes(self, payload):
        assert unwrap_questions(payload) is None


class TestNormalizeQuestion:

    def test_complete_question_is_kept(self, arithmetic_question):
        question = normalize_question(arithmetic_question)

        assert question.text == "2+2?"
        assert question.options == ("3", "4", "5", "6")
        assert question.correct_index == 1
        assert question.explanation == "Basic arithmetic"

    def test_question_instance_passes_through(self, arithmetic_question):
        question = Question.model_validate(arithmetic_question)

        assert normalize_question(question) is question

    def test_snake_case_keys(self):
        question = normalize_question({
            "text": "Q",
            "options": ["a", "b", "c", "d"],
            "correct_index": 2,
        })

        assert question.text == "Q"
        assert question.correct_index == 2

    def test_defaults_for_empty_entry(self):
        question = normalize_question({})

        assert question.text == QUESTION_TEXT_MISSING
        assert question.options == ("", "", "", "")
        assert question.correct_index == 0
        assert question.explanation == ""

    def test_options_padded_and_truncated(self):
        short = normalize_question({"question": "Q", "options": ["a", None]})
        long = normalize_question({"question": "Q", "options": ["a", "b", "c", "d", "e"]})

        assert short.options == ("a", "", "", "")
        assert long.options == ("a", "b", "c", "d")

    def test_non_string_options_are_coerced(self):
        question = normalize_question({"question": "Q", "options": [1, 2.5, True, "x"]})

        assert question.options == ("1", "2.5", "True", "x")

    @pytest.mark.parametrize("value", [None, "one", "1.5", 1.5, True, -1, 4, "7"])
    def test_invalid_correct_index_defaults_to_zero(self, value):
        question = normalize_question({
            "question": "Q",
            "options": ["a", "b", "c", "d"],
            "correctIndex": value,
        })

        assert question.correct_index == 0

    @pytest.mark.parametrize("value", ["2", " 2 ", 2.0])
    def test_numeric_correct_index_is_converted(self, value):
        question = normalize_question({
            "question": "Q",
            "options": ["a", "b", "c", "d"],
            "correctIndex": value,
        })

        assert question.correct_index == 2

    def test_correct_index_beyond_given_options(self):
        question = normalize_question({"question": "Q", "options": ["a", "b"], "correctIndex": 3})

        assert question.correct_index == 0

    def test_blank_text_uses_placeholder(self):
        assert normalize_question({"question": "   "}).text == QUESTION_TEXT_MISSING

    def test_question_is_immutable(self, arithmetic_question):
        question = normalize_question(arithmetic_question)

        with pytest.raises(Exception):
            question.correct_index = 3

    def test_options_and_questions_cannot_be_mutated(self, arithmetic_question):
        quiz = Quiz(questions=[arithmetic_question])

        assert isinstance(quiz.questions, tuple)
        assert isinstance(quiz.questions[0].options, tuple)
        with pytest.raises(AttributeError):
            quiz.questions[0].options.append("7")
        with pytest.raises(TypeError):
            quiz.questions[0].options[1] = "5"
