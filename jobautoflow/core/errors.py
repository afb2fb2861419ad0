"""
Domain errors raised by services and rendered by the API exception handler
as {"detail": message, "code": code}.
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return "Internal server error"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    @classmethod
    def default_message(cls) -> str:
        return "Resource not found"


class AutoApplyDisabled(AppError):
    status_code = 400
    code = "AUTO_APPLY_DISABLED"

    @classmethod
    def default_message(cls) -> str:
        return "Auto-apply is not enabled"


class RateLimitExceeded(AppError):
    status_code = 429
    code = "RATE_LIMIT"

    @classmethod
    def default_message(cls) -> str:
        return "Daily auto-apply limit reached"


class DuplicateApplication(AppError):
    status_code = 409
    code = "DUPLICATE_ERROR"

    @classmethod
    def default_message(cls) -> str:
        return "You have already applied to this job"


class AIScoringUnavailable(AppError):
    """Raised by the LLM client; the match scorer always recovers from it."""

    status_code = 503
    code = "AI_SCORING_UNAVAILABLE"

    @classmethod
    def default_message(cls) -> str:
        return "AI scoring unavailable"
