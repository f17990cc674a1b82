"""
Logging Configuration
Structured (JSON) or rich console logging to stderr, with a correlation ID
shared by every log line of one haproxyctl invocation
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Context variable for correlation ID tracking across one invocation
correlation_id_context: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

LOG_FORMATS = ("text", "json")


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = correlation_id_context.get()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, ensure_ascii=False, separators=(',', ':'), default=str)


def setup_logging(log_level: str = "WARNING", log_format: str = "text") -> logging.Logger:
    """Configure the root logger; stdout is left to the report"""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unknown log format {log_format!r}, expected one of {LOG_FORMATS}")

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {log_level!r}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove default handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_format == "json":
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    # aiohttp is chatty at DEBUG
    logging.getLogger("aiohttp").setLevel(max(level, logging.INFO))

    app_logger = logging.getLogger("haproxyctl")
    app_logger.setLevel(level)
    return app_logger


def get_correlation_id() -> str:
    """Get or create the correlation ID for this invocation"""
    correlation_id = correlation_id_context.get()
    if not correlation_id:
        correlation_id = str(uuid.uuid4())[:8]  # Short UUID for logs
        correlation_id_context.set(correlation_id)
    return correlation_id


def log_with_correlation(logger: logging.Logger, level: str, message: str,
                         stacklevel: int = 2, **extra_fields):
    """Log message with correlation ID and extra fields

    ``stacklevel`` picks the frame reported as the record's location; the
    default is whoever called this function.
    """
    get_correlation_id()
    numeric_level = getattr(logging, level.upper())
    extra = {"extra_fields": extra_fields} if extra_fields else None
    logger.log(numeric_level, message, extra=extra, stacklevel=stacklevel)


class PerformanceLogger:
    """Context manager timing one call against a load balancer"""

    def __init__(self, logger: logging.Logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = time.monotonic()
        log_with_correlation(
            self.logger, "DEBUG",
            f"Starting operation: {self.operation}",
            stacklevel=3,
            **self.context
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = round((time.monotonic() - self.start_time) * 1000, 2)

        if exc_type:
            log_with_correlation(
                self.logger, "WARNING",
                f"Operation failed: {self.operation} ({exc_val})",
                stacklevel=3,
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **self.context
            )
        else:
            log_with_correlation(
                self.logger, "INFO",
                f"Operation completed: {self.operation}",
                stacklevel=3,
                duration_ms=self.duration_ms,
                **self.context
            )
        # never suppress
        return False
