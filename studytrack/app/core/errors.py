"""Error taxonomy shared by the services and the HTTP layer.

Services raise these exceptions and never build HTTP responses themselves.
``main.py`` turns any ``AppError`` into a JSON body of the form
``{"detail": <message>, "error": <error type>}`` with the matching status code.
"""

from fastapi import status


class AppError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "ServerError"
    default_message: str = "An internal error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input. The client has to fix the request."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "ValidationError"
    default_message = "Validation failed"


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "Unauthorized"
    default_message = "Not authenticated"


class ForbiddenError(AppError):
    """The caller is authenticated but may not touch the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    error_type = "Forbidden"
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "NotFound"
    default_message = "Resource not found"

    def __init__(self, resource: str | None = None):
        super().__init__(f"{resource} not found" if resource else None)


class ConflictError(AppError):
    """A uniqueness rule would be violated."""

    status_code = status.HTTP_409_CONFLICT
    error_type = "Conflict"
    default_message = "Resource already exists"


class ServerError(AppError):
    """Unexpected store failure."""
