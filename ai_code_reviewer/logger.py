from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from typing import Any

from loguru import logger as _logger

_CONFIGURED = False
LOG_LEVEL_ENV = "APP_LOG_LEVEL"
# Set to "1" by GitHub when a workflow is re-run with debug logging enabled.
RUNNER_DEBUG_ENV = "RUNNER_DEBUG"

_BASE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def _resolve_level(explicit: str | None) -> str:
    if explicit:
        return explicit
    if os.getenv(RUNNER_DEBUG_ENV) == "1":
        return "DEBUG"
    return os.getenv(LOG_LEVEL_ENV, "INFO")


def _format_record(record) -> str:
    """Append bound context (path, hunk, repository) as ``key=value`` pairs."""

    context = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
    if context:
        return f"{_BASE_FORMAT} <dim>[{context}]</dim>\n{{exception}}"
    return f"{_BASE_FORMAT}\n{{exception}}"


def configure_logger(*, level: str | None = None) -> None:
    """Configure the Loguru logger exactly once per process.

    Action runners capture stdout only, so that is the single sink.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    _logger.remove()
    _logger.add(
        sys.stdout,
        level=_resolve_level(level),
        format=_format_record,
        colorize=sys.stdout.isatty(),
    )
    _CONFIGURED = True


def get_logger(*, level: str | None = None):
    """Return the configured logger, configuring it on first access."""

    configure_logger(level=level)
    return _logger


def log_with_context(logger_instance, **context: str | int | None) -> Any:
    """Add context fields to log messages.

    Usage:
        logger = log_with_context(get_logger(), path="src/app.ts", hunk="@@ -1,3 +1,4 @@")
        logger.info("Reviewing hunk")
    """
    return logger_instance.bind(**{k: v for k, v in context.items() if v is not None})


def log_timing(logger_instance, operation: str, **context: str | int | None):
    """Context manager to log operation timing.

    Usage:
        with log_timing(logger, "fetch_diff", repository="owner/repo"):
            # operation code
    """
    @contextmanager
    def _timing():
        start_time = time.time()
        ctx_logger = log_with_context(logger_instance, **context)
        ctx_logger.debug(f"Starting {operation}")
        try:
            yield ctx_logger
            duration = time.time() - start_time
            ctx_logger.debug(f"Completed {operation} in {duration:.3f}s")
        except Exception as exc:
            duration = time.time() - start_time
            ctx_logger.error(f"Failed {operation} after {duration:.3f}s: {exc}")
            raise
    return _timing()


def log_success(logger_instance, message: str, **context: str | int | None) -> None:
    """Log a success message with context."""
    log_with_context(logger_instance, **context).info(f"=== SUCCESS: {message} ===")


def log_failure(logger_instance, message: str, error: Exception | None = None, **context: str | int | None) -> None:
    """Log a failure message with context and optional error."""
    ctx_logger = log_with_context(logger_instance, **context)
    if error:
        ctx_logger.error(f"=== FAILURE: {message} | Error: {error} ===")
    else:
        ctx_logger.error(f"=== FAILURE: {message} ===")
