"""
Structured JSON logging with correlation IDs.

Provides:
- JSON format for log aggregation
- Request correlation IDs and the acting username
- Timed operations for conversions and storage calls
"""

import logging
import json
import time
import uuid
from contextvars import ContextVar
from typing import Optional, Dict, Any
from datetime import datetime, timezone

# Context variables for request ID and the authenticated username
request_id_ctx: ContextVar[Optional[str]] = ContextVar(
    "request_id", default=None)
username_ctx: ContextVar[Optional[str]] = ContextVar(
    "username", default=None)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in JSON format with standardized fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_ctx.get()
        if request_id:
            log_data["request_id"] = request_id

        username = username_ctx.get()
        if username:
            log_data["username"] = username

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed through extra={"extra_fields": {...}}
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class RequestLogger:
    """
    Logger that attaches keyword arguments as structured fields.

    Usage:
        logger = get_structured_logger(__name__)
        logger.info("Conversion finished", tables=3, documents=12)
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: int, msg: str, **kwargs):
        if not self.logger.isEnabledFor(level):
            return

        extra_fields = kwargs.copy()
        request_id = request_id_ctx.get()
        if request_id:
            extra_fields["request_id"] = request_id

        self.logger.log(level, msg, extra={"extra_fields": extra_fields})

    def debug(self, msg: str, **kwargs):
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs):
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs):
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs):
        self._log(logging.ERROR, msg, **kwargs)


class PerformanceTracker:
    """
    Context manager for tracking operation duration.

    Usage:
        with PerformanceTracker("relational_conversion", logger, root="items"):
            model = converter.to_relational(data, "items")
    """

    def __init__(
        self,
        operation: str,
        logger: logging.Logger,
        log_level: int = logging.INFO,
        **extra_fields,
    ):
        """
        Initialize performance tracker.

        Args:
            operation: Operation name
            logger: Logger instance
            log_level: Log level for completion message
            **extra_fields: Additional structured fields
        """
        self.operation = operation
        self.logger = logger
        self.log_level = log_level
        self.extra_fields = extra_fields
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def _fields(self) -> Dict[str, Any]:
        extra = {"operation": self.operation, **self.extra_fields}
        request_id = request_id_ctx.get()
        if request_id:
            extra["request_id"] = request_id
        return extra

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(
            f"Starting operation: {self.operation}",
            extra={"extra_fields": self._fields()},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = round(
            (time.perf_counter() - self.start_time) * 1000, 2)
        extra = self._fields()
        extra["duration_ms"] = self.duration_ms

        if exc_type:
            extra["error"] = str(exc_val)
            extra["error_type"] = exc_type.__name__
            self.logger.error(
                f"Operation failed: {self.operation}",
                extra={"extra_fields": extra},
            )
        else:
            self.logger.log(
                self.log_level,
                f"Operation completed: {self.operation}",
                extra={"extra_fields": extra},
            )
        return False


def setup_logging(log_level: str = "INFO", json_format: bool = True):
    """
    Configure application logging.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting if True, standard format if False
    """
    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # uvicorn logs every request itself; the middleware already does that
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context.

    Args:
        request_id: Request ID (generated if not provided)

    Returns:
        Request ID
    """
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_ctx.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Get current request ID from context."""
    return request_id_ctx.get()


def set_username(username: Optional[str]) -> None:
    """Record the acting user for subsequent log lines."""
    username_ctx.set(username)


def clear_request_context():
    """Clear request ID and username from context."""
    request_id_ctx.set(None)
    username_ctx.set(None)


def get_structured_logger(name: str) -> RequestLogger:
    """Get a structured logger instance."""
    return RequestLogger(logging.getLogger(name))
