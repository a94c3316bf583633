#!/usr/bin/env python3
"""Structured logging for apivisibility.

This module wraps the standard ``logging`` package with:
- Key-value context rendered after the message (``msg | key=value``)
- Thread-local context stacks (``add_context``)
- Console and rotating file handlers
- Shared logger instances per name, with package loggers governed by
  a single ``configure_logging`` call

Example:
    >>> logger = Logger(level=LogLevel.INFO)
    >>> logger.info("Engine ready", mode="mixed", allow=2, deny=1)
    >>> with logger.add_context(app="demo"):
    ...     logger.debug("Route hidden", group="User")
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "apivisibility"


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50


def _coerce_level(level: Union[LogLevel, int, str]) -> LogLevel:
    if isinstance(level, str):
        return LogLevel[level.upper()]
    return LogLevel(level)


class Logger:
    """Structured logger with context support.

    Context attached through ``add_context`` is thread-local, so concurrent
    catalogue builds for different applications do not mix their fields.
    """

    _context_stack = threading.local()

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: Optional[Union[LogLevel, str]] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
        propagate: bool = False,
    ):
        """Initialize logger.

        Args:
            name: Logger name for identification
            level: Minimum log level to output, None to inherit the parent's
            handlers: Optional list of logging handlers
            propagate: Pass records on to the parent logger's handlers
        """
        self.name = name
        self.logger = logging.getLogger(name)
        if level is None:
            self.logger.setLevel(logging.NOTSET)
        else:
            self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = propagate

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create rotating file handler.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured rotating file handler
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        """Add a new output handler."""
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Remove an output handler."""
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: New log level (LogLevel or string)
        """
        self.logger.setLevel(_coerce_level(level))

    def get_level(self) -> LogLevel:
        """Get current log level, following the parent when inherited."""
        return LogLevel(self.logger.getEffectiveLevel())

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        """Check if logger would output at this level."""
        return self.logger.isEnabledFor(_coerce_level(level))

    def _get_context(self) -> Dict[str, Any]:
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        context: Dict[str, Any] = {}
        for ctx in self._context_stack.stack:
            context.update(ctx)
        return context

    @staticmethod
    def _format_message(msg: str, context: Dict[str, Any]) -> str:
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs):
        """Context manager to add temporary context.

        Example:
            >>> with logger.add_context(app="demo"):
            ...     logger.info("Applying visibility")
        """
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        self._context_stack.stack.append(kwargs)
        try:
            yield
        finally:
            self._context_stack.stack.pop()

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any], **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        combined = self._get_context()
        combined.update(context)
        self.logger.log(level, self._format_message(msg, combined), extra={"context": combined}, **kwargs)

    def debug(self, msg: str, **context) -> None:
        """Log debug message with context key-value pairs."""
        self._log(LogLevel.DEBUG, msg, context)

    def info(self, msg: str, **context) -> None:
        """Log info message with context key-value pairs."""
        self._log(LogLevel.INFO, msg, context)

    def warning(self, msg: str, **context) -> None:
        """Log warning message with context key-value pairs."""
        self._log(LogLevel.WARNING, msg, context)

    def error(self, msg: str, **context) -> None:
        """Log error message with context key-value pairs."""
        self._log(LogLevel.ERROR, msg, context)

    def exception(self, msg: str, exc: Exception, **context) -> None:
        """Log exception with traceback.

        Args:
            msg: Log message
            exc: Exception to log
            **context: Additional context key-value pairs
        """
        context["exception_type"] = type(exc).__name__
        context["exception_message"] = str(exc)
        self._log(LogLevel.ERROR, msg, context, exc_info=exc)


# Logger instances by name
_loggers: Dict[str, Logger] = {}


def get_logger(name: str = ROOT_LOGGER_NAME) -> Logger:
    """Get or create a logger instance.

    Loggers below ``apivisibility`` (``apivisibility.engine``,
    ``apivisibility.fastapi``) have no handlers or level of their own and
    hand records to the ``apivisibility`` logger, so ``configure_logging``
    governs them all.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name not in _loggers:
        if name.startswith(ROOT_LOGGER_NAME + "."):
            get_logger(ROOT_LOGGER_NAME)
            _loggers[name] = Logger(name=name, level=None, handlers=[], propagate=True)
        else:
            _loggers[name] = Logger(name=name)
    return _loggers[name]


def set_global_logger(logger: Logger) -> None:
    """Register logger as the instance returned for its name."""
    _loggers[logger.name] = logger


def configure_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> Logger:
    """Configure the ``apivisibility`` logger and every logger below it.

    Handlers of the previously configured instance are closed.

    Args:
        level: Minimum log level
        log_file: Optional path for a rotating log file

    Returns:
        The configured ``apivisibility`` logger
    """
    previous = _loggers.get(ROOT_LOGGER_NAME)
    if previous is not None:
        for handler in list(previous.logger.handlers):
            handler.close()

    logger = Logger(ROOT_LOGGER_NAME, level=level)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger
