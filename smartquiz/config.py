import os
import logging

from smartquiz.errors import ConfigurationError

logger = logging.getLogger(__name__)

QUIZ_LENGTH = 10
OPTION_COUNT = 4

DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_BACKEND_URL = "http://localhost:8000"

# Values shipped in example .env files; never a real key
PLACEHOLDER_KEYS = {
    "paste_your_long_api_key_here",
    "your_groq_api_key_here",
    "your_api_key_here",
    "changeme",
}


def configure_logging():
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=os.getenv("LOG_LEVEL", "INFO").upper()
    )


def get_api_key() -> str:
    return os.getenv("GROQ_API_KEY", "")


def get_model() -> str:
    return os.getenv("GROQ_MODEL", DEFAULT_MODEL)


def get_temperature() -> float:
    return float(os.getenv("GROQ_TEMPERATURE", "0.7"))


def get_max_tokens() -> int:
    return int(os.getenv("GROQ_MAX_TOKENS", "4096"))


def get_timeout() -> float:
    return float(os.getenv("GROQ_TIMEOUT", "60"))


def get_backend_url() -> str:
    return os.getenv("BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/")


def get_telegram_token():
    return os.getenv("TELEGRAM_BOT_TOKEN")


def is_placeholder_key(api_key) -> bool:
    if not api_key or not api_key.strip():
        return True
    key = api_key.strip()
    return key.lower() in PLACEHOLDER_KEYS or "!!!" in key


def require_api_key(api_key) -> str:
    """Return the key, or raise ConfigurationError if it is unset or a placeholder."""
    if is_placeholder_key(api_key):
        logger.error("GROQ_API_KEY is not set in the environment or .env file")
        raise ConfigurationError("GROQ_API_KEY missing or placeholder")
    return api_key.strip()
