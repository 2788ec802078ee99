import json
import logging

import groq
from groq import AsyncGroq

from smartquiz import config
from smartquiz.errors import (
    ExternalServiceError,
    InvalidCredentialError,
    MalformedResponseError,
)
from smartquiz.models import Quiz
from smartquiz.normalize import normalize_questions, unwrap_questions

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""You are a helpful quiz generation assistant.
Your task is to generate a {config.QUIZ_LENGTH}-question multiple-choice quiz on a given topic.
Return ONLY a valid JSON object, with no other text, no markdown and no ```json fences.

The JSON object must have a single key "questions", which is an array of exactly {config.QUIZ_LENGTH} question objects.
Each question object must have the following keys:
- "question": a string (the question text)
- "options": an array of exactly 4 strings (the options)
- "correctIndex": an integer (0-3), the index of the correct option
- "explanation": a string (a brief explanation of the correct answer)"""

USER_PROMPT_TEMPLATE = 'Generate the {count}-question quiz on the topic: "{topic}"'

# Messages the upstream API uses when the key itself is rejected
INVALID_KEY_PHRASES = ("api key not valid", "invalid api key", "invalid_api_key")


def build_messages(topic: str) -> list:
    return [
        {
            "role": "system",
            "content": SYSTEM_PROMPT
        },
        {
            "role": "user",
            "content": USER_PROMPT_TEMPLATE.format(count=config.QUIZ_LENGTH, topic=topic)
        }
    ]


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    return text


def parse_quiz_payload(text) -> Quiz:
    """Turn the model's raw output into a Quiz.

    Only the overall shape is enforced here; per-question gaps are filled in
    by normalize_questions.
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponseError("empty completion content")

    try:
        payload = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error(f"Model returned invalid JSON: {text[:500]}")
        raise MalformedResponseError(f"Invalid JSON response from AI: {e}") from e

    items = unwrap_questions(payload)
    if items is None:
        logger.error(f"Model JSON has no question list: {text[:500]}")
        raise MalformedResponseError("payload is neither a question list nor wraps one")
    if not all(isinstance(item, dict) for item in items):
        logger.error(f"Model question list contains non-objects: {text[:500]}")
        raise MalformedResponseError("question list contains non-object entries")

    if len(items) != config.QUIZ_LENGTH:
        logger.warning(f"Model returned {len(items)} questions instead of {config.QUIZ_LENGTH}")

    return Quiz(questions=normalize_questions(items))


def _upstream_message(error: groq.APIStatusError) -> str:
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error", body)
        if isinstance(detail, dict) and isinstance(detail.get("message"), str):
            return detail["message"]
    return getattr(error, "message", None) or str(error)


def is_invalid_credential(error: groq.APIStatusError) -> bool:
    if isinstance(error, groq.AuthenticationError):
        return True
    if error.status_code not in (400, 401, 403):
        return False
    message = _upstream_message(error).lower()
    return any(phrase in message for phrase in INVALID_KEY_PHRASES)


class QuizGenerator:
    """Generates quizzes through the Groq chat-completions API.

    The instance only carries configuration, so a single generator can serve
    concurrent requests.
    """

    def __init__(self, api_key=None, model=None, client=None):
        self.api_key = config.get_api_key() if api_key is None else api_key
        self.model = model or config.get_model()
        self.temperature = config.get_temperature()
        self.max_tokens = config.get_max_tokens()
        self._client = client

    @property
    def client(self) -> AsyncGroq:
        if self._client is None:
            # Retries are left to the caller
            self._client = AsyncGroq(
                api_key=self.api_key,
                timeout=config.get_timeout(),
                max_retries=0
            )
        return self._client

    async def generate(self, topic: str) -> Quiz:
        config.require_api_key(self.api_key)
        logger.info(f"Received quiz request for topic: {topic}")

        try:
            chat_completion = await self.client.chat.completions.create(
                messages=build_messages(topic),
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"}
            )
        except groq.APIStatusError as e:
            logger.error(f"Groq API returned status {e.status_code}: {e.body}")
            if is_invalid_credential(e):
                raise InvalidCredentialError(_upstream_message(e)) from e
            raise ExternalServiceError(f"status {e.status_code}: {_upstream_message(e)}") from e
        except groq.APIConnectionError as e:
            logger.error(f"Could not reach Groq API: {e}")
            raise ExternalServiceError(str(e)) from e
        except groq.APIResponseValidationError as e:
            logger.error(f"Groq API returned an unusable body: {e.body!r}")
            raise MalformedResponseError(str(e)) from e
        except groq.GroqError as e:
            logger.error(f"Groq client error: {e}")
            raise ExternalServiceError(str(e)) from e

        try:
            response_text = chat_completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            logger.error(f"Unexpected completion shape: {chat_completion!r}")
            raise MalformedResponseError("completion has no message content") from e

        quiz = parse_quiz_payload(response_text)
        logger.info(f"Successfully generated {len(quiz.questions)} questions for topic: {topic}")
        return quiz
