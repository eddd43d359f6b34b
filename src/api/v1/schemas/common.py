"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel

_ERROR_DESCRIPTIONS = {
    400: "Invalid request",
    401: "Missing or invalid token",
    403: "Insufficient permissions",
    404: "Not found",
    409: "Conflicts with the current state",
}


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    message: str
    details: Any | None = None


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` entries for the given error statuses."""
    return {
        code: {"model": ErrorResponse, "description": _ERROR_DESCRIPTIONS.get(code, "Error")}
        for code in status_codes
    }
