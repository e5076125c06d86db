r"""
Logging configuration module for the irongolem client runtime.

Provides a configurable logging setup using the colorlog library with
structured error logging and aggregation.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections import defaultdict
from typing import Any

import colorlog

from .constants import ERROR_ALERT_RATE_PER_HOUR, ERROR_HISTORY_PER_TYPE


class ErrorAggregator:
    """Aggregates error occurrences per category.

    Tracks error frequencies so a long-running client can tell a flapping
    connection from a one-off failure.
    """

    def __init__(self) -> None:
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        """Record an error occurrence with context."""
        self.errors[error_type].append(
            {"timestamp": time.time(), "message": message, "context": context or {}}
        )
        if len(self.errors[error_type]) > ERROR_HISTORY_PER_TYPE:
            self.errors[error_type] = self.errors[error_type][-ERROR_HISTORY_PER_TYPE:]

    def get_error_summary(self) -> dict[str, Any]:
        """Get a summary of error patterns."""
        summary = {}
        current_time = time.time()
        runtime_hours = (current_time - self.start_time) / 3600
        for error_type, occurrences in self.errors.items():
            recent_count = len(
                [e for e in occurrences if current_time - e["timestamp"] < 3600]
            )
            summary[error_type] = {
                "total_count": len(occurrences),
                "recent_count": recent_count,
                "rate_per_hour": len(occurrences) / max(runtime_hours, 1),
                "last_occurrence": occurrences[-1] if occurrences else None,
            }
        return summary

    def should_alert(
        self, error_type: str, threshold_rate: float = ERROR_ALERT_RATE_PER_HOUR
    ) -> bool:
        """Check if an error type should trigger an alert based on rate."""
        summary = self.get_error_summary()
        if error_type not in summary:
            return False
        return summary[error_type]["rate_per_hour"] > threshold_rate

    def clear(self) -> None:
        self.errors.clear()
        self.start_time = time.time()


# Global error aggregator instance
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context for better tracking.

    Args:
        error_type: Category of the error (e.g., 'fatal', 'auth', 'network')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"
    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {str(exception)}"
    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)
    error_aggregator.record_error(error_type, message, context)

    if error_aggregator.should_alert(error_type):
        logging.critical(
            f"🚨 HIGH ERROR RATE ALERT: {error_type} occurring at "
            f"{error_aggregator.get_error_summary()[error_type]['rate_per_hour']:.1f}/hour"
        )


class LoggerConfigurator:
    """Handles logging configuration using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = config or {}

    def configure(self) -> None:
        """Configure logging with colored output using colorlog.

        Uses environment variables:
        - DEBUG: Set to 'true', '1', or 'yes' for DEBUG level, otherwise INFO
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

        handler = logging.StreamHandler(self.config.get("stream", sys.stderr))
        handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        # aiohttp access chatter is never useful for a chat client
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def setup_logging(config: dict[str, Any] | None = None) -> None:
    """Convenience wrapper for applications embedding the client."""
    LoggerConfigurator(config).configure()
