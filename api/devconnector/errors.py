"""Error kinds raised by services and rendered by the API exception handler."""

from typing import Any

from fastapi import status


class ServiceError(Exception):
    """
    Base class for failures that are turned into a structured API response.

    Subclasses fix the error code and HTTP status; the message is what the
    caller sees, so it must never carry internal detail.
    """

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "request_id": request_id,
        }
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class Unauthorized(ServiceError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class BadRequest(ServiceError):
    """Validation failure carrying every violated rule."""

    code = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, violations: list[dict[str, Any]], message: str | None = None):
        self.violations = violations
        if message is None and violations:
            message = violations[0]["msg"]
        super().__init__(message, details=violations)


class InvalidIdentifier(ServiceError):
    code = "INVALID_IDENTIFIER"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid ID"


class NotFound(ServiceError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PartialFailure(ServiceError):
    """A multi-step operation failed after earlier steps were committed."""

    code = "PARTIAL_FAILURE"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Operation did not complete"

    def __init__(self, completed: list[str], failed: str, message: str | None = None):
        self.completed = completed
        self.failed = failed
        super().__init__(
            message or f"Operation stopped at step '{failed}'",
            details={"completed": completed, "failed": failed},
        )


class StoreUnavailable(ServiceError):
    code = "STORE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Server error"
