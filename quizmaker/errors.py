"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status and a short machine code that the
exception handler in ``main.py`` renders as ``{"error": ..., "code": ...}``.
Anything that is not a ``QuizError`` is reported as a plain 500.
"""


class QuizError(Exception):
    status_code = 500
    code = "error"
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationFailed(QuizError):
    status_code = 400
    code = "validation"
    default_message = "Invalid request."


class InvalidInput(ValidationFailed):
    code = "invalid_input"


class Unauthorized(QuizError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class QuotaExhausted(QuizError):
    status_code = 402
    code = "quota_exhausted"
    default_message = "AI credits exhausted. Please add funds to continue."


class NotFound(QuizError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class SessionStateError(QuizError):
    status_code = 409
    code = "session_state"
    default_message = "Operation not allowed in the current quiz phase."


class RateLimited(QuizError):
    status_code = 429
    code = "rate_limited"
    default_message = "Rate limit exceeded. Please try again in a moment."


class GenerationFailed(QuizError):
    status_code = 502
    code = "generation_failed"
    default_message = "Failed to generate questions. Please try again."


class UpstreamParseFailure(GenerationFailed):
    code = "parse_failure"
    default_message = "Failed to parse generated questions"


class InvalidQuestionsFormat(GenerationFailed):
    code = "invalid_format"
    default_message = "Invalid questions format"


class PersistenceFailure(QuizError):
    status_code = 500
    code = "persistence_failure"
    default_message = "Failed to save test results."
