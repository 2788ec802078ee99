from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Tuple, Union


class QuizRequest(BaseModel):
    topic: str


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(..., alias="question")
    options: Tuple[str, ...] = Field(..., min_length=4, max_length=4)
    correct_index: int = Field(..., alias="correctIndex", ge=0, le=3)
    explanation: str = ""


class Quiz(BaseModel):
    model_config = ConfigDict(frozen=True)

    questions: Tuple[Question, ...]


class EvaluateRequest(BaseModel):
    """Quiz as sent back by the client plus its answers.

    Both fields are left loosely typed: the quiz is whatever the generator
    produced earlier, and shape problems are handled by the evaluator.
    """
    model_config = ConfigDict(populate_by_name=True)

    quiz_data: Optional[Union[dict, list]] = Field(None, alias="quizData")
    user_answers: Optional[List[Any]] = Field(None, alias="userAnswers")


class FeedbackItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question: str
    user_answer: str = Field(..., alias="userAnswer")
    correct_answer: str = Field(..., alias="correctAnswer")
    is_correct: bool = Field(..., alias="isCorrect")
    explanation: str


class ScoreReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    total: int
    feedback: Tuple[FeedbackItem, ...]
