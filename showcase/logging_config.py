"""Structured logging configuration for the Showcase API."""

from __future__ import annotations

import logging
import sys

from showcase.utils.time import utc_now

_CONTEXT_KEYS = ("request_id", "method", "path", "status_code", "duration_ms")


class JSONFormatter(logging.Formatter):
    """Formats log records as structured key=value lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Include request context if middleware injects it.
        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        parts = [
            f"[{log_entry['level']:<7}]",
            log_entry["timestamp"],
            f"{log_entry['logger']}:",
            log_entry["message"],
        ]
        for key in _CONTEXT_KEYS:
            if key in log_entry:
                parts.append(f"{key}={log_entry[key]}")

        if record.exc_info and record.exc_info[1]:
            parts.append(f"\n{self.formatException(record.exc_info)}")

        return " ".join(parts)


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()

    # Avoid adding handlers multiple times
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Quiet noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
