"""
Exception handling utilities for tokenprobe.

Decorators that turn foreign exceptions (torch, transformers, tokenizers)
into ``ProbeError`` subclasses with a stable error code.
"""

import functools
from typing import Any, Callable, Type, TypeVar

from tokenprobe.utils.error_manager import (
    ProbeError,
    ErrorCode,
    ModelError,
    DecodeError,
    TokenizationError,
)
from tokenprobe.utils.logger import get_logger

logger = get_logger("exception_handlers")

T = TypeVar("T")


def handle_exceptions(
    error_message: str = "An error occurred",
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    error_class: Type[ProbeError] = ProbeError,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for handling exceptions in a standardized way.

    ``ProbeError`` instances pass through untouched; anything else is wrapped
    in ``error_class`` and re-raised with the original as its cause.

    Args:
        error_message: Message prefix for the wrapped error
        error_code: Error code to use for the wrapped error
        error_class: Error class to use for the wrapped error

    Returns:
        Decorated function
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except ProbeError:
                raise
            except Exception as e:
                func_name = getattr(func, "__name__", "unknown")
                module_name = getattr(func, "__module__", "unknown")
                logger.debug(f"Wrapping {type(e).__name__} from {module_name}.{func_name}")
                raise error_class(
                    message=f"{error_message}: {e}", code=error_code, cause=e
                ) from e

        return wrapper

    return decorator


def handle_model_errors(error_message: str = "Model operation failed", **kwargs):
    """Decorator for model loading errors."""
    kwargs.setdefault("error_code", ErrorCode.MODEL_LOAD_FAILED)
    return handle_exceptions(error_message=error_message, error_class=ModelError, **kwargs)


def handle_decode_errors(error_message: str = "Decode failed", **kwargs):
    """Decorator for forward-pass errors."""
    kwargs.setdefault("error_code", ErrorCode.MODEL_DECODE_FAILED)
    return handle_exceptions(error_message=error_message, error_class=DecodeError, **kwargs)


def handle_tokenization_errors(error_message: str = "Tokenization failed", **kwargs):
    """Decorator for tokenizer errors."""
    kwargs.setdefault("error_code", ErrorCode.TOKENIZE_FAILED)
    return handle_exceptions(
        error_message=error_message, error_class=TokenizationError, **kwargs
    )
