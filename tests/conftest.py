# =============================================================================
# CONFTEST - Shared fixtures
# =============================================================================

import json
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import groq
import httpx
import pytest


GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Test environment shared by the whole session."""
    env_vars = {
        "GROQ_API_KEY": "gsk_test_key_123",
        "BACKEND_URL": "http://backend.test",
        "LOG_LEVEL": "ERROR",
    }
    with patch.dict(os.environ, env_vars):
        yield


# =============================================================================
# QUIZ DATA
# =============================================================================


@pytest.fixture
def arithmetic_question():
    return {
        "question": "2+2?",
        "options": ["3", "4", "5", "6"],
        "correctIndex": 1,
        "explanation": "Basic arithmetic",
    }


@pytest.fixture
def ten_questions():
    return [
        {
            "question": f"Question {i}?",
            "options": [f"opt {i}-{j}" for j in range(4)],
            "correctIndex": i % 4,
            "explanation": f"Because {i}",
        }
        for i in range(10)
    ]


# =============================================================================
# GROQ CLIENT DOUBLES
# =============================================================================


def make_completion(content):
    """Chat completion shaped like the SDK's response object."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_status_error(cls, status_code, message):
    body = {"error": {"message": message, "type": "invalid_request_error"}}
    request = httpx.Request("POST", GROQ_URL)
    response = httpx.Response(status_code, request=request, json=body)
    return cls(f"Error code: {status_code} - {body}", response=response, body=body)


def make_connection_error():
    return groq.APIConnectionError(request=httpx.Request("POST", GROQ_URL))


@pytest.fixture
def groq_client():
    """Groq client double; set ``create.return_value`` or ``create.side_effect``."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def generator(groq_client):
    from smartquiz.services import QuizGenerator

    return QuizGenerator(api_key="gsk_test_key_123", client=groq_client)


@pytest.fixture
def completion_for():
    """Build a completion whose content is the JSON encoding of ``payload``."""

    def _build(payload):
        return make_completion(json.dumps(payload))

    return _build


@pytest.fixture
def status_error():
    return make_status_error


@pytest.fixture
def connection_error():
    return make_connection_error


@pytest.fixture
def completion_with_text():
    return make_completion
