"""
Translation of domain exceptions into HTTP errors.
"""

from fastapi import HTTPException, status

from app.core.exceptions import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

STATUS_BY_ERROR: list[tuple[type[AppError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def to_http_exception(exc: AppError) -> HTTPException:
    """Map a domain error to an HTTPException carrying the envelope fields."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    detail: dict = {"message": exc.message}
    if exc.details is not None:
        detail["errors"] = exc.details
    return HTTPException(status_code=status_code, detail=detail)
