"""
Logging system for tokenprobe.

Wraps the standard ``logging`` module with context tracking, an optional
rotating file handler and helpers for timing operations. Console output goes
to stderr so that the CLI can keep stdout for results.
"""

import sys
import time
import logging
import contextvars
from typing import Dict, Optional
from logging.handlers import RotatingFileHandler
from pathlib import Path
from contextlib import contextmanager

from tokenprobe.utils.config_manager import config


# Per-task context; asyncio tasks and run_in_threadpool workers each see a copy
_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "tokenprobe_log_context", default={}
)

# Global context that applies to all threads
_global_context = {}


class ContextAwareFormatter(logging.Formatter):
    """
    Formatter that appends per-task and global context to log records.
    """

    def format(self, record):
        """Format the log record with context information."""
        self._add_context_to_record(record)
        return super().format(record)

    def _add_context_to_record(self, record):
        context = {**_global_context, **_context.get()}

        for key, value in context.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        if context:
            items = " ".join(f"{key}={value}" for key, value in context.items())
            record.context_str = f" [{items}]"
        else:
            record.context_str = ""


class ProbeLogger:
    """
    Logger for tokenprobe.

    Features:
    - Context key-value pairs attached to records
    - Optional rotating file handler
    - ``operation()`` context manager that logs start, duration and failures
    """

    def __init__(self, name: str, log_file: Optional[str] = None):
        """
        Initialize the logger.

        Args:
            name: Logger name
            log_file: Log file name (defaults to name.log in config.logging.log_dir)
        """
        self.name = name
        self.logger = logging.getLogger(name)

        log_level = getattr(logging, config.logging.log_level.upper(), logging.INFO)
        self.logger.setLevel(log_level)
        self.logger.propagate = False

        # Remove any existing handlers to avoid duplicate logs
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)

        self._setup_handlers(log_file)

    def _setup_handlers(self, log_file: Optional[str]):
        console_formatter = ContextAwareFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s%(context_str)s"
        )
        file_formatter = ContextAwareFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s%(context_str)s"
        )

        if config.logging.console_logging:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if config.logging.enable_file_logging:
            if log_file is None:
                log_file = f"{self.name.replace('.', '_')}.log"

            log_path = Path(config.logging.log_dir) / log_file
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    def _log(self, level: int, msg: str, *args, exc_info=None, **kwargs):
        """
        Log a message with the specified level and context.

        Args:
            level: Log level
            msg: Message to log
            *args: Arguments for string formatting
            exc_info: Exception info
            **kwargs: Context key-value pairs to add to this record only
        """
        with self.context(**kwargs):
            self.logger.log(level, msg, *args, exc_info=exc_info, stacklevel=3)

    def debug(self, msg, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        self._log(logging.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        """Log an exception with traceback."""
        kwargs["exc_info"] = kwargs.get("exc_info", True)
        self._log(logging.ERROR, msg, *args, **kwargs)

    @contextmanager
    def context(self, **kwargs):
        """
        Context manager for adding temporary context to logs.

        Args:
            **kwargs: Context key-value pairs
        """
        token = _context.set({**_context.get(), **kwargs})
        try:
            yield
        finally:
            _context.reset(token)

    @contextmanager
    def operation(self, operation_name: str, level: int = logging.INFO):
        """
        Context manager for tracking and logging operations.

        Args:
            operation_name: Name of the operation
            level: Log level for start and completion messages
        """
        self._log(level, f"Starting operation: {operation_name}")
        start_time = time.time()

        try:
            yield
        except Exception as e:
            elapsed = time.time() - start_time
            self._log(
                logging.ERROR,
                f"Failed operation: {operation_name} after {elapsed:.3f}s - {e}",
                operation=operation_name,
                error_type=type(e).__name__,
            )
            raise

        elapsed = time.time() - start_time
        self._log(
            level,
            f"Completed operation: {operation_name} in {elapsed:.3f}s",
            operation=operation_name,
        )


def add_global_context(**kwargs):
    """Add context that will be included in all log records."""
    _global_context.update(kwargs)


_loggers: Dict[str, ProbeLogger] = {}


def get_logger(name: str) -> ProbeLogger:
    """
    Get or create a logger by name.

    Args:
        name: Logger name

    Returns:
        ProbeLogger: Logger instance
    """
    if name not in _loggers:
        _loggers[name] = ProbeLogger(name)
    return _loggers[name]


def set_level(level: str) -> None:
    """Change the level of the configuration and of every logger created so far."""
    config.logging.log_level = level.upper()
    numeric_level = getattr(logging, config.logging.log_level, logging.INFO)
    for probe_logger in _loggers.values():
        probe_logger.logger.setLevel(numeric_level)
