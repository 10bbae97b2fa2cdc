"""Error taxonomy for event handlers.

Every error raised by a handler is an ``EventError``. The HTTP layer turns it
into the ``{"success": false, "error": {...}}`` envelope and uses
``status_code`` as the response status.
"""

from typing import Any


class EventError(Exception):
    """Base exception for all handler-visible failures."""
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: Any = None,
        status_code: int | None = None,
        extra: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"message": self.message, "code": self.status_code}
        if self.details is not None:
            error["details"] = self.details
        error.update(self.extra)
        return error


# --- 400 ---
class ValidationError(EventError):
    status_code = 400
    default_message = "Invalid request"


class UnknownStep(ValidationError):
    pass


class EmptyText(ValidationError):
    default_message = "Text content is required"


class UnsupportedContentType(ValidationError):
    pass


# --- 401 / 403 ---
class Unauthorized(EventError):
    status_code = 401
    default_message = "Authentication required"


class NoToken(Unauthorized):
    default_message = "No authorization token provided"


class InvalidToken(Unauthorized):
    default_message = "Invalid token"


class Forbidden(EventError):
    status_code = 403
    default_message = "You don't have permission to perform this action"


# --- 404 ---
class NotFound(EventError):
    status_code = 404
    default_message = "Resource not found"


class CompanyNotFound(NotFound):
    default_message = "Company not found"


class JobNotFound(NotFound):
    default_message = "Job not found"


# --- Conflicts ---
class Conflict(EventError):
    status_code = 409
    default_message = "Resource was modified concurrently, reload and retry"


class DuplicateSlug(Conflict):
    status_code = 400
    default_message = "Company with this slug already exists"


# --- Gateway failures ---
class UpstreamError(EventError):
    status_code = 500
    default_message = "Upstream service error"


class InternalError(UpstreamError):
    default_message = "Internal server error"


class StorageMisconfigured(UpstreamError):
    default_message = "Storage bucket not found"


class PermissionDenied(UpstreamError):
    status_code = 403
    default_message = "Database permission error"


class GatewayTimeout(UpstreamError):
    status_code = 504
    default_message = "Request timed out"


# --- AI service ---
class AIServiceError(EventError):
    status_code = 500
    default_message = "AI service error"


class EmptyAIResponse(AIServiceError):
    default_message = "AI service returned empty response"


class InvalidAIFormat(AIServiceError):
    default_message = "AI service returned invalid format"
