"""Shape checks and defaults for quiz payloads coming from the model.

The model's JSON is treated as semi-trusted and validated in two tiers:

* structural -- the payload must resolve to a list of questions, either bare
  or wrapped in an object. Failing this is the caller's error to raise.
* per-field -- anything wrong inside a single question is replaced by a
  default, so one bad entry never costs the learner the whole quiz.

Default table applied by :func:`normalize_question`:

    field          accepted                         default
    question       non-empty string                 "Question text missing"
    options        list, items coerced to str       [] then padded with "" to 4
    correctIndex   int in range of given options;   0
                   integral floats and digit
                   strings ("2", 2.0) become ints
    explanation    string                           ""

Options beyond the fourth are dropped. An absent ``correctIndex`` and a real
``0`` end up identical; there is no way to tell them apart afterwards.
"""
from typing import Any, List, Optional

from smartquiz.config import OPTION_COUNT
from smartquiz.models import Question, Quiz

QUESTION_TEXT_MISSING = "Question text missing"

WRAPPER_KEYS = ("questions", "quiz")


def unwrap_questions(payload: Any) -> Optional[List[Any]]:
    """Resolve a bare list or a ``{"questions": [...]}`` object to the list.

    Returns None when the payload has neither shape.
    """
    if isinstance(payload, Quiz):
        return list(payload.questions)
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    return None


def _first(raw: dict, *keys):
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _normalize_options(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return ["" if item is None else str(item) for item in value[:OPTION_COUNT]]


def _normalize_index(value, option_count: int) -> int:
    # bool is an int subclass; True must not count as index 1
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if not isinstance(value, int):
        return 0
    if 0 <= value < option_count:
        return value
    return 0


def normalize_question(raw: Any) -> Question:
    if isinstance(raw, Question):
        return raw
    if not isinstance(raw, dict):
        raw = {}

    text = _first(raw, "question", "text")
    if not isinstance(text, str) or not text.strip():
        text = QUESTION_TEXT_MISSING

    options = _normalize_options(raw.get("options"))
    correct_index = _normalize_index(_first(raw, "correctIndex", "correct_index"), len(options))
    options += [""] * (OPTION_COUNT - len(options))

    explanation = raw.get("explanation")
    if not isinstance(explanation, str):
        explanation = ""

    return Question(
        text=text,
        options=options,
        correct_index=correct_index,
        explanation=explanation
    )


def normalize_questions(items: List[Any]) -> List[Question]:
    return [normalize_question(item) for item in items]
