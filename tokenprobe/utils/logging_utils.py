"""
Logging utilities for tokenprobe.

Provides a mixin so that classes share one logging setup built on
``tokenprobe.utils.logger``.
"""

import logging
from typing import Optional

from tokenprobe.utils.config_manager import get_debug_mode
from tokenprobe.utils.logger import get_logger


class LoggingMixin:
    """
    Mixin class to provide consistent logging functionality.

    Usage:
        class MyClass(LoggingMixin):
            def __init__(self):
                self.setup_logging("my_class")

            def my_method(self):
                self.log("This is a debug-only message")
    """

    def setup_logging(self, logger_name: str, debug_mode: Optional[bool] = None):
        """
        Set up logging for this class.

        Args:
            logger_name: Name of the logger
            debug_mode: Whether to enable debug mode (overrides config if provided)
        """
        if debug_mode is None:
            debug_mode = get_debug_mode(logger_name)

        self._probe_logger = get_logger(logger_name)
        self.logger = self._probe_logger.logger
        self.debug_mode = debug_mode

    def log(self, message: str, level: str = "info", **kwargs):
        """
        Log a message if debug mode is enabled.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error, critical)
            **kwargs: Additional context key-value pairs
        """
        if not getattr(self, "debug_mode", False):
            return

        valid_levels = ["info", "debug", "warning", "error", "critical"]
        if level not in valid_levels:
            raise ValueError(
                f"Invalid log level: {level}. Must be one of {valid_levels}"
            )

        getattr(self._probe_logger, level)(message, **kwargs)

    def operation(self, operation_name: str, level: int = logging.INFO):
        """Create a context manager for tracking operations."""
        return self._probe_logger.operation(operation_name, level=level)
