"""
Structured Logging Configuration with structlog

Outputs JSON logs that are searchable in any log aggregator.
Every log includes: version, timestamp and, when set, the current
operation and target id (asset public id or record id).
"""

import sys
import inspect
import logging
import structlog
from typing import Optional, Any, Dict
from datetime import datetime
from contextvars import ContextVar
from functools import wraps

# Context variables for call-scoped logging
operation_var: ContextVar[Optional[str]] = ContextVar("operation", default=None)
target_id_var: ContextVar[Optional[str]] = ContextVar("target_id", default=None)

# Library version
APP_VERSION = "1.0.0"


def add_app_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add library context to every log entry."""
    event_dict["version"] = APP_VERSION

    operation = operation_var.get()
    if operation:
        event_dict.setdefault("operation", operation)

    target_id = target_id_var.get()
    if target_id:
        event_dict.setdefault("target_id", target_id)

    return event_dict


def add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add ISO format timestamp."""
    event_dict["timestamp"] = datetime.utcnow().isoformat() + "Z"
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True
):
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; if False, output colored console logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Silence noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            add_timestamp,
            add_app_context,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.UnicodeDecoder(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for setting logging context.

    Usage:
        with LogContext(operation="delete", target_id="blog-images/abc"):
            logger.info("delete_started")
    """

    def __init__(self, operation: Optional[str] = None, target_id: Optional[str] = None):
        self.operation = operation
        self.target_id = target_id
        self._operation_token = None
        self._target_id_token = None

    def __enter__(self):
        if self.operation:
            self._operation_token = operation_var.set(self.operation)
        if self.target_id:
            self._target_id_token = target_id_var.set(self.target_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._target_id_token:
            target_id_var.reset(self._target_id_token)
        if self._operation_token:
            operation_var.reset(self._operation_token)
        return False


def with_logging(operation: str):
    """
    Decorator wrapping a coroutine with start/complete/fail log events.

    Usage:
        @with_logging("upload")
        async def upload(self, file_data: bytes) -> Asset:
            ...
    """
    def decorator(func):
        if not inspect.iscoroutinefunction(func):
            raise TypeError("with_logging only wraps coroutine functions")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            token = operation_var.set(operation)

            logger.info("operation_started")
            start_time = datetime.utcnow()

            try:
                result = await func(*args, **kwargs)
                duration_ms = int((datetime.utcnow() - start_time).total_seconds() * 1000)
                logger.info("operation_completed", duration_ms=duration_ms)
                return result
            except Exception as e:
                duration_ms = int((datetime.utcnow() - start_time).total_seconds() * 1000)
                logger.error(
                    "operation_failed",
                    duration_ms=duration_ms,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise
            finally:
                operation_var.reset(token)

        return wrapper

    return decorator


# Example log output structure:
# {
#   "timestamp": "2024-05-20T10:00:00Z",
#   "level": "info",
#   "event": "upload_completed",
#   "operation": "upload",
#   "target_id": "blog-images/abc123",
#   "version": "1.0.0",
#   "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/blog-images/abc123.webp"
# }
