import logging
from typing import Any, List, Optional, Sequence

from smartquiz.errors import InvalidInputError
from smartquiz.models import FeedbackItem, ScoreReport
from smartquiz.normalize import normalize_question, unwrap_questions

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer provided"
CORRECT_ANSWER_MISSING = "Correct answer missing"
NO_EXPLANATION = "No explanation provided."


def _option_text(options: Sequence[str], index: Optional[int], placeholder: str) -> str:
    if index is None or not 0 <= index < len(options):
        return placeholder
    return options[index] or placeholder


def _learner_index(answers: List[Any], position: int) -> Optional[int]:
    if position >= len(answers):
        return None
    answer = answers[position]
    if isinstance(answer, bool) or not isinstance(answer, int):
        return None
    return answer


def evaluate(quiz_data: Any, user_answers: Optional[List[Any]]) -> ScoreReport:
    """Score ``user_answers`` against ``quiz_data``.

    ``quiz_data`` may be a bare list of questions or an object wrapping them
    under ``questions``. Answers are matched to questions by position; a
    missing, ``None`` or non-integer answer never matches. Problems inside a
    single question fall back to defaults instead of failing the evaluation.
    """
    if quiz_data is None or user_answers is None:
        raise InvalidInputError("quiz data or user answers absent")

    questions = unwrap_questions(quiz_data)
    if questions is None:
        raise InvalidInputError(f"quiz data of type {type(quiz_data).__name__} has no question list")

    score = 0
    feedback = []
    for position, raw in enumerate(questions):
        question = normalize_question(raw)
        chosen = _learner_index(user_answers, position)
        is_correct = chosen == question.correct_index
        if is_correct:
            score += 1

        feedback.append(FeedbackItem(
            question=question.text,
            user_answer=_option_text(question.options, chosen, NO_ANSWER),
            correct_answer=_option_text(question.options, question.correct_index, CORRECT_ANSWER_MISSING),
            is_correct=is_correct,
            explanation=question.explanation or NO_EXPLANATION
        ))

    logger.info(f"Evaluated quiz: {score}/{len(questions)} correct")
    return ScoreReport(score=score, total=len(questions), feedback=feedback)
