"""
Domain error types raised by services and translated by the API layer.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that map to an HTTP status code."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(AppError):
    """Malformed or missing input. Carries a field-level error list."""
    status_code = 400
    default_message = "Invalid data"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Forbidden"


class UnexpectedError(AppError):
    """Upstream or storage failure. The message is safe to show to clients."""
    status_code = 500
