"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for projectdesk."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(AppError):
    """Resource not found."""

    pass


class ConflictError(AppError):
    """Operation conflicts with the current state of a resource."""

    pass


class ValidationError(AppError):
    """Validation error."""

    pass


class AuthenticationError(AppError):
    """Authentication failed."""

    pass


class AuthorizationError(AppError):
    """Authorization failed."""

    pass


class ForbiddenError(AuthorizationError):
    """Forbidden operation (authorization denied)."""

    pass


class InfrastructureError(AppError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass
