"""
Error handling utilities for the tokenprobe HTTP API.

Every error leaves the server as ``{"error": "<message>"}`` with the matching
status code.
"""

from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tokenprobe.utils.error_manager import ProbeError, ErrorCode


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint."""

    error: str = Field(..., description="Error message")

    model_config = {
        "json_schema_extra": {
            "example": {"error": "Missing or empty field: prompt"}
        }
    }


class APIError(Exception):
    """
    Base API error class with standardized formatting.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.message
        self.status_code = status_code or self.status_code
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """Convert the error to a JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(error=self.message).model_dump(),
        )


class RequestError(APIError):
    """Error for malformed or invalid requests."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class ModelNotAvailableError(APIError):
    """Error for when the engine is not loaded or was shut down."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Model is not available"


_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONTEXT_WINDOW_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MODEL_NOT_AVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def from_probe_error(error: ProbeError) -> APIError:
    """
    Map a ``ProbeError`` to the API error carrying its HTTP status.

    Validation problems are the caller's fault (400), a closed engine is 503,
    everything else (decode, tokenizer, model failures) is 500.
    """
    status_code = _STATUS_BY_CODE.get(
        error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return APIError(message=error.message, status_code=status_code)
