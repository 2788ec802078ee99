class QuizError(Exception):
    """Base class for errors surfaced to API callers as {"error": message}."""

    status_code = 500
    message = "An error occurred on the server."

    def __init__(self, detail: str = None):
        # detail is for server-side logs only; callers only ever see message
        self.detail = detail or self.message
        super().__init__(self.detail)


class ConfigurationError(QuizError):
    status_code = 500
    message = "Server configuration error: API key is missing or not set."


class ExternalServiceError(QuizError):
    status_code = 502
    message = "Failed to generate quiz. An error occurred while contacting the quiz generator."


class InvalidCredentialError(ExternalServiceError):
    message = "Failed to generate quiz. Your API key is not valid."


class MalformedResponseError(QuizError):
    status_code = 502
    message = "Failed to generate quiz. The generated data was not in the expected format."


class InvalidInputError(QuizError):
    status_code = 400
    message = "Missing quiz data or user answers."
