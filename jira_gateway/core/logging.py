"""
Structured Logging Configuration for the JIRA API gateway

This module provides structured JSON logging that's compatible with
log aggregation systems like ELK Stack, Grafana Loki, Datadog, and Splunk.
Loggers obtained through structlog are routed into the same handlers.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

import structlog

# Context variables for request tracing
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[int]] = ContextVar("user_id", default=None)

_RESERVED_ATTRS = frozenset(
    [
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName", "request_id", "user_id",
    ]
)


def get_request_id() -> Optional[str]:
    """Get current request ID."""
    return request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set request ID, generating one if not provided."""
    if request_id is None:
        request_id = str(uuid4())
    request_id_var.set(request_id)
    return request_id


def set_user_context(user_id: Optional[int] = None):
    """Set the calling platform user for logging."""
    if user_id is not None:
        user_id_var.set(user_id)


def clear_context():
    """Clear all context variables."""
    request_id_var.set(None)
    user_id_var.set(None)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(
        self,
        service_name: str = "jira-gateway",
        environment: str = "development",
        include_extra_fields: bool = True,
    ):
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.include_extra_fields = include_extra_fields

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "@timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
                "module": record.module,
            },
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        user_id = user_id_var.get()
        if user_id is not None:
            log_entry["user_id"] = user_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        if self.include_extra_fields:
            extra_fields = {
                key: self._serialize_value(value)
                for key, value in record.__dict__.items()
                if key not in _RESERVED_ATTRS
            }
            if extra_fields:
                log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str)

    def _serialize_value(self, value: Any) -> Any:
        """Serialize a value for JSON output."""
        if isinstance(value, (str, int, float, bool, type(None))):
            return value
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        if isinstance(value, dict):
            return {k: self._serialize_value(v) for k, v in value.items()}
        return str(value)


class RequestContextFilter(logging.Filter):
    """Filter that adds request context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        record.user_id = user_id_var.get()
        return True


def configure_structlog() -> None:
    """Route structlog loggers through the standard library handlers."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(
    log_level: str = "INFO",
    service_name: str = "jira-gateway",
    environment: str = "development",
    json_output: bool = True,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name of the service for log identification
        environment: Environment name (development, staging, production)
        json_output: If True, output logs as JSON; otherwise use standard format
        log_file: Optional file path to also write logs to

    Returns:
        Configured root logger
    """
    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    if json_output:
        formatter = JSONFormatter(service_name=service_name, environment=environment)
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(RequestContextFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(RequestContextFilter())
        root_logger.addHandler(file_handler)

    # Reduce verbosity of third-party loggers
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("oauthlib").setLevel(logging.WARNING)
    logging.getLogger("requests_oauthlib").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    configure_structlog()

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


class LogEvent:
    """Predefined log event types for consistent logging."""

    # Caller authentication
    AUTH_TOKEN_MISSING = "auth.token.missing"
    AUTH_TOKEN_INVALID = "auth.token.invalid"

    # JIRA authorization
    JIRA_CREDENTIAL_MISSING = "jira.credential.missing"
    JIRA_CREDENTIAL_ERROR = "jira.credential.error"
    JIRA_APPLICATION_KEY_ERROR = "jira.application_key.error"

    # JIRA calls
    JIRA_CALL_SUCCEEDED = "jira.call.succeeded"
    JIRA_CALL_NOT_FOUND = "jira.call.not_found"
    JIRA_CALL_FAILED = "jira.call.failed"

    # Requests refused before or instead of a JIRA call
    REQUEST_REJECTED = "request.rejected"

    # System events
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"
    SYSTEM_ERROR = "system.error"
    INTEGRATION_UNAVAILABLE = "system.integration.unavailable"


def log_event(
    event_type: str,
    message: str,
    level: str = "INFO",
    **kwargs,
):
    """
    Log a structured event with consistent formatting.

    Example:
        log_event(
            LogEvent.JIRA_CALL_NOT_FOUND,
            "JIRA returned not found",
            jira_url="https://jira.example.com",
        )
    """
    logger = logging.getLogger("jira_gateway.events")
    log_level = getattr(logging, level.upper())
    logger.log(log_level, message, extra={"event_type": event_type, **kwargs})
