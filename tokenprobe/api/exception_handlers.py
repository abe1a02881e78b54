"""
Exception handlers for the tokenprobe API.

Every failure is rendered as ``{"error": "<message>"}``.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tokenprobe.utils.api_errors import APIError, from_probe_error
from tokenprobe.utils.error_manager import ProbeError
from tokenprobe.utils.logger import get_logger

logger = get_logger("tokenprobe-api")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Handle custom API errors."""
        return exc.to_response()

    @app.exception_handler(ProbeError)
    async def probe_error_handler(request: Request, exc: ProbeError):
        """Map domain errors (validation, context overflow, decode) to statuses."""
        return from_probe_error(exc).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Convert routing errors (404, 405) to the standard body."""
        return APIError(message=str(exc.detail), status_code=exc.status_code).to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Handle Pydantic validation errors from request parsing."""
        fields = ", ".join(
            ".".join(str(loc) for loc in error.get("loc", [])) for error in exc.errors()
        )
        return APIError(
            message=f"Request validation failed: {fields}",
            status_code=status.HTTP_400_BAD_REQUEST,
        ).to_response()

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all uncaught exceptions."""
        logger.exception(f"Uncaught exception: {exc}")
        return APIError(
            message=f"An unexpected error occurred: {exc}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ).to_response()
