"""
Error management for tokenprobe.

This module provides the error classes, error codes and severity levels shared
by the engine, the service layer, the CLI and the HTTP API.
"""

import logging
from enum import Enum
from typing import Dict, Any, Optional


# Configure module logger
logger = logging.getLogger("tokenprobe-error")


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    CRITICAL = "CRITICAL"  # Application cannot continue
    ERROR = "ERROR"  # Operation failed, but application can continue
    WARNING = "WARNING"  # Caller supplied bad input


class ErrorCode(Enum):
    """
    Standard error codes for tokenprobe.

    Format: CATEGORY_DESCRIPTION
    """

    # Model errors
    MODEL_LOAD_FAILED = "MODEL_LOAD_FAILED"
    MODEL_NOT_AVAILABLE = "MODEL_NOT_AVAILABLE"
    MODEL_DECODE_FAILED = "MODEL_DECODE_FAILED"

    # Tokenization errors
    TOKENIZE_FAILED = "TOKENIZE_FAILED"

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONTEXT_WINDOW_EXCEEDED = "CONTEXT_WINDOW_EXCEEDED"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ProbeError(Exception):
    """
    Base exception class for tokenprobe.

    Carries a code, a severity and the original cause, and logs itself once
    on creation.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        cause: Optional[Exception] = None,
        **kwargs,
    ):
        """
        Initialize a ProbeError.

        Args:
            message: Error message
            code: Error code
            severity: Error severity level
            cause: Original exception that caused this error
            **kwargs: Additional information attached to the error
        """
        self.message = message
        self.code = code
        self.severity = severity
        self.cause = cause
        self.additional_info: Dict[str, Any] = dict(kwargs)

        full_message = message
        if cause:
            full_message += f" (Caused by: {type(cause).__name__}: {cause})"

        super().__init__(full_message)

        self._log_error()

    def _log_error(self):
        log_message = f"ERROR [{self.code.value}] ({self.severity.value}): {self}"
        if self.additional_info:
            details = ", ".join(f"{k}={v}" for k, v in self.additional_info.items())
            log_message += f" [{details}]"

        if self.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif self.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        else:
            logger.warning(log_message)


class ModelError(ProbeError):
    """Error related to model loading or availability."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.MODEL_LOAD_FAILED, **kwargs
    ):
        super().__init__(message, code=code, severity=ErrorSeverity.ERROR, **kwargs)


class DecodeError(ModelError):
    """The engine failed to evaluate the prompt."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.MODEL_DECODE_FAILED, **kwargs
    ):
        super().__init__(message, code=code, **kwargs)


class TokenizationError(ProbeError):
    """Error related to tokenization."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.TOKENIZE_FAILED, **kwargs
    ):
        super().__init__(message, code=code, severity=ErrorSeverity.ERROR, **kwargs)


class ValidationError(ProbeError):
    """Error related to input validation."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        if field:
            kwargs["field"] = field
        self.field = field

        super().__init__(
            message,
            code=kwargs.pop("code", ErrorCode.VALIDATION_ERROR),
            severity=ErrorSeverity.WARNING,
            **kwargs,
        )


class ContextWindowExceededError(ValidationError):
    """The prompt has more tokens than the engine's context window."""

    def __init__(self, n_tokens: int, n_ctx: int, **kwargs):
        self.n_tokens = n_tokens
        self.n_ctx = n_ctx
        super().__init__(
            f"Prompt is too long: {n_tokens} tokens exceeds the context window of {n_ctx}",
            field="prompt",
            code=ErrorCode.CONTEXT_WINDOW_EXCEEDED,
            n_tokens=n_tokens,
            n_ctx=n_ctx,
            **kwargs,
        )
