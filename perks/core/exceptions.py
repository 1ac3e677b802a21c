"""
Domain exceptions for the perks API.

Services raise these for business rule violations; the handlers registered in
``perks.core.handlers`` translate them into the error envelope with the
matching HTTP status code. Anything that is not an ``AppError`` is treated as
an unexpected failure.
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class AppError(Exception):
    """
    Base class for operational errors that are safe to show to the client.

    Args:
        message: Human-readable error message
        errors: Optional field-level details, e.g. ``[{"field": "email", "message": "..."}]``
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, errors={self.errors!r})"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class UnclaimableError(ValidationError):
    """Raised when a deal's state rules out a new claim."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid token"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"
