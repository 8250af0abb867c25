"""Structured logging module with JSON output support."""

import json
import sys
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.utils.config import config

_LEVEL_ORDER = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}


class StructuredLogger:
    """Logger that outputs JSON-formatted log entries."""

    def __init__(
        self, component: str, file_path: str | None = None, min_level: str | None = None
    ):
        """
        Initialize the structured logger.

        Args:
            component: Name of the component using this logger
            file_path: Optional path to write logs to file
            min_level: Lowest level written; defaults to the configured LOG_LEVEL
        """
        self.component = component
        self.file_path = file_path
        self._min_level = min_level.upper() if min_level else None
        if file_path:
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def min_level(self) -> str:
        return self._min_level or config.server.log_level

    def is_enabled(self, level: str) -> bool:
        return _LEVEL_ORDER.get(level, 20) >= _LEVEL_ORDER.get(self.min_level, 20)

    def _format_log_entry(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: dict[str, Any] | None = None,
    ) -> str:
        """
        Format a log entry as JSON.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            message: Log message
            context: Optional context fields
            exception: Optional exception details

        Returns:
            JSON-formatted log entry
        """
        entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level,
            "component": self.component,
            "message": message,
        }

        if context:
            entry["context"] = context

        if exception:
            entry["exception"] = exception

        return json.dumps(entry, default=str)

    def _write_log(self, log_entry: str) -> None:
        try:
            print(log_entry, file=sys.stdout)
            if self.file_path:
                with open(self.file_path, "a") as f:
                    f.write(log_entry + "\n")
        except Exception as e:
            print(f"Failed to write log: {e}", file=sys.stderr)

    def _emit(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        if not self.is_enabled(level):
            return

        exc_dict = None
        if exception:
            exc_dict = {
                "type": type(exception).__name__,
                "message": str(exception),
                "stack_trace": "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                ),
            }

        self._write_log(self._format_log_entry(level, message, context, exc_dict))

    def debug(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log a debug message."""
        self._emit("DEBUG", message, context)

    def info(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log an info message."""
        self._emit("INFO", message, context)

    def warning(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log a warning message."""
        self._emit("WARNING", message, context)

    def error(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """Log an error message with optional exception details."""
        self._emit("ERROR", message, context, exception)

    def critical(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """Log a critical message with optional exception details."""
        self._emit("CRITICAL", message, context, exception)

    def log(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """
        Log a message with specified level.

        Unrecognized levels are logged as INFO.
        """
        level = level.upper()
        if level not in _LEVEL_ORDER:
            level = "INFO"
        self._emit(level, message, context, exception)
