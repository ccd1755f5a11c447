"""
Response envelope shared by all endpoints.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """``{success, data?, message?}`` envelope."""

    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None
    total: Optional[int] = None


def error_body(message: str, errors: Optional[Any] = None) -> dict[str, Any]:
    """Build the failure envelope."""
    body: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return body
