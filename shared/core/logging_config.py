"""
Structured JSON logging for the storefront service.

Every record is one JSON object carrying service metadata, the request
context (request id, correlation id, signed-in user), source location,
exception details and any ``extra={"extra_fields": {...}}`` the caller passed.
Secrets are redacted before the record is formatted.
"""

import logging
import logging.handlers
import os
import re
import sys
import json
import time
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from contextvars import ContextVar
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

# Request-scoped context
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

REDACTED = "***REDACTED***"

class StructuredFormatter(logging.Formatter):
    """Render a record as a single line of JSON."""

    def __init__(self, service_name: str = "storefront", environment: str = "development", version: str = "1.0.0"):
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "@timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
            "version": self.version,
        }

        trace_context = current_request_context()
        if trace_context:
            log_obj["trace"] = trace_context

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
            "module": record.module,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        return json.dumps(log_obj, default=str)

class SecurityFilter(logging.Filter):
    """Redact credentials and signatures from messages and custom fields."""

    SENSITIVE_FIELDS = (
        'password', 'token', 'api_key', 'secret', 'signature',
        'authorization', 'cookie',
    )
    # key=value or key: value pairs inside free-form messages
    _PAIR = re.compile(
        r"(?i)\b(" + "|".join(SENSITIVE_FIELDS) + r")(\w*)(\s*[=:]\s*)([^\s,;]+)"
    )

    def _is_sensitive(self, key: str) -> bool:
        lowered = key.lower()
        return any(field in lowered for field in self.SENSITIVE_FIELDS)

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: REDACTED if self._is_sensitive(str(k)) else self._scrub(v)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [self._scrub(v) for v in value]
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        scrubbed = self._PAIR.sub(lambda m: f"{m.group(1)}{m.group(2)}{m.group(3)}{REDACTED}", message)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = ()
        if hasattr(record, 'extra_fields'):
            record.extra_fields = self._scrub(record.extra_fields)
        return True

def setup_logging(
    service_name: str,
    level: str = "INFO",
    environment: str = "development",
    version: str = "1.0.0",
    log_file: Optional[str] = None,
) -> None:
    """
    Route the root logger through the JSON formatter.

    Args:
        service_name: Reported as ``service`` on every record
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Reported as ``environment``
        version: Reported as ``version``
        log_file: Also write to this rotating file when given
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    formatter = StructuredFormatter(service_name, environment, version)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(SecurityFilter())
        root_logger.addHandler(handler)

    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={'extra_fields': {'service': service_name, 'level': level, 'file': log_file}},
    )

def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

def current_request_context() -> Optional[Dict[str, str]]:
    context = {
        "request_id": request_id_var.get(),
        "correlation_id": correlation_id_var.get(),
        "user_id": user_id_var.get(),
    }
    context = {k: v for k, v in context.items() if v}
    return context or None

def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    if request_id:
        request_id_var.set(request_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)
    if user_id:
        user_id_var.set(user_id)

def generate_request_id() -> str:
    return str(uuid.uuid4())

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log the start and end of every request with its duration, and echo the
    request id back in ``X-Request-ID``.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        set_request_context(
            request_id=request_id,
            correlation_id=request.headers.get('X-Correlation-ID'),
        )
        user_id_var.set(None)

        logger = get_logger(__name__)
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={'extra_fields': {
                'method': request.method,
                'path': request.url.path,
                'client_host': request.client.host if request.client else None,
            }},
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'duration_ms': (time.perf_counter() - start_time) * 1000,
                }},
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={'extra_fields': {
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': (time.perf_counter() - start_time) * 1000,
            }},
        )
        response.headers['X-Request-ID'] = request_id
        return response
