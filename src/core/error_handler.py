"""Centralized error handling and logging for the AI CFO API.

This module provides:
- Global exception handler for FastAPI
- Structured logging with correlation IDs
- Environment-aware error responses (generic in production, detailed in dev)
- Prevention of sensitive data leakage
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pythonjsonlogger.json import JsonFormatter
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from core.config import get_settings
from core.exceptions import (
    AssistantError,
    CompletionGatewayError,
    DatasetError,
    MissingCredentialError,
    ProductNotFoundError,
)
from core.security_config import get_allowed_error_fields, is_sensitive_key
from schemas.api import ErrorResponse


# Context variable for correlation ID tracking across async calls
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

logger = logging.getLogger(__name__)

# Error type mappings for consistent responses: (message, error type, status)
ERROR_TYPE_MESSAGES: dict[type[Exception], tuple[str, str, int]] = {
    CompletionGatewayError: (
        "The AI service could not complete the request",
        "gateway_error",
        502,
    ),
    MissingCredentialError: (
        "The AI service is not configured",
        "service_unavailable",
        503,
    ),
    ProductNotFoundError: (
        "The requested resource was not found",
        "not_found",
        404,
    ),
    DatasetError: (
        "Financial data is currently unavailable",
        "service_unavailable",
        503,
    ),
}


def get_correlation_id() -> str:
    """Get or create a correlation ID for request tracing."""
    correlation_id: str | None = _correlation_id_var.get()
    if correlation_id is None or correlation_id == "":
        new_id = str(uuid.uuid4())
        _correlation_id_var.set(new_id)
        return new_id
    return correlation_id


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_var.set(correlation_id)


class StructuredLogger:
    """Structured logger that includes correlation IDs and sanitized data."""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)

    def _log_with_context(
        self,
        level: int,
        message: str,
        extra_data: dict[str, Any] | None = None,
        exc_info: bool = False,
    ) -> None:
        """Log with correlation ID and structured data."""
        correlation_id = get_correlation_id()

        # Sanitize extra data to prevent PII leakage
        sanitized_data = self._sanitize_data(extra_data or {})

        log_data = {
            "correlation_id": correlation_id,
            **sanitized_data,
        }

        settings = get_settings()
        if settings.ENVIRONMENT == "production":
            # The JsonFormatter configured in `setup_logging()` renders
            # `structured_data` as a nested object; no double-encoding.
            self.logger.log(
                level,
                message,
                extra={"structured_data": log_data},
                exc_info=exc_info,
            )
        else:
            self.logger.log(
                level,
                f"[{correlation_id}] {message}",
                extra={"structured_data": log_data},
                exc_info=exc_info,
            )

    def _sanitize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Remove or mask sensitive data from log entries."""
        if not isinstance(data, dict) or not data:
            return {}

        header_redaction = self._redact_header_like(data)
        if header_redaction is not None:
            return header_redaction

        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if is_sensitive_key(key):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = self._sanitize_value(value)

        return sanitized

    def _sanitize_value(self, value: Any) -> Any:
        """Sanitize a single value which may be a dict, list, or primitive."""
        if isinstance(value, dict):
            return self._sanitize_data(value)
        if isinstance(value, list):
            return [self._sanitize_value(item) for item in value]
        return value

    def _redact_header_like(self, data: dict[str, Any]) -> dict[str, Any] | None:
        """If `data` is a header-like dict, return a redacted version or None.

        A header-like dict has keys like `name`/`key` and `value`. If the name/key
        is considered sensitive, its value is redacted.
        """
        if not (
            ("name" in data and "value" in data) or ("key" in data and "value" in data)
        ):
            return None

        header_name = data.get("name") or data.get("key")
        if not isinstance(header_name, str) or not is_sensitive_key(header_name):
            return None

        redacted: dict[str, Any] = {}
        for sub_k, sub_v in data.items():
            if sub_k.lower() in {"value", "val", "v"}:
                redacted[sub_k] = "[REDACTED]"
            elif isinstance(sub_v, dict):
                redacted[sub_k] = self._sanitize_data(sub_v)
            else:
                redacted[sub_k] = "[REDACTED]" if is_sensitive_key(sub_k) else sub_v

        return redacted

    def info(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log_with_context(logging.ERROR, message, kwargs, exc_info=True)


# Global structured logger instance
structured_logger = StructuredLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Adopt the caller's X-Correlation-ID (or mint one) for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        set_correlation_id(request.headers.get("X-Correlation-ID"))
        correlation_id = get_correlation_id()
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


class ExceptionNormalizationMiddleware(BaseHTTPMiddleware):
    """Catch any uncaught Exception and delegate to global_exception_handler."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            return await global_exception_handler(request, exc)


def _build_error_response(
    *,
    correlation_id: str,
    error_type: str,
    message: str,
    environment: str,
    details: dict[str, Any] | None = None,
    traceback_str: str | None = None,
    exception_type: str | None = None,
    validation_errors: Any | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Construct a sanitized JSON error response respecting environment rules."""
    allowed_fields = get_allowed_error_fields(environment)

    error_body: dict[str, Any] = {
        "correlation_id": correlation_id,
        "type": error_type,
    }

    if "details" in allowed_fields and details:
        error_body["details"] = details
    if "traceback" in allowed_fields and traceback_str:
        error_body["traceback"] = traceback_str
    if "exception_type" in allowed_fields and exception_type:
        error_body["exception_type"] = exception_type
    if "validation_errors" in allowed_fields and validation_errors is not None:
        error_body["validation_errors"] = validation_errors

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            message=message,
            error=error_body,
            success=False,
        ).model_dump(),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler providing structured, sanitized responses."""
    settings = get_settings()
    environment = settings.ENVIRONMENT
    correlation_id = get_correlation_id()

    if isinstance(exc, StarletteHTTPException):
        status_code = getattr(exc, "status_code", 500)
        detail = getattr(exc, "detail", "An error occurred")
        http_error_body: dict[str, Any] = {
            "correlation_id": correlation_id,
            "type": "http_error",
        }
        if environment != "production":
            http_error_body["details"] = {"detail": detail}
            http_error_body["exception_type"] = exc.__class__.__name__
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                message=str(detail) if status_code < 500 else "An HTTP error occurred",
                error=http_error_body,
                success=False,
            ).model_dump(),
        )

    if isinstance(exc, ValidationError | RequestValidationError):
        structured_logger.warning(
            "Validation error",
            validation_errors=getattr(exc, "errors", lambda: [])(),
        )
        return _build_error_response(
            correlation_id=correlation_id,
            error_type="validation_error",
            message="Invalid request data provided",
            environment=environment,
            validation_errors=exc.errors(),
            status_code=422,
        )

    mapped = ERROR_TYPE_MESSAGES.get(type(exc))
    if mapped is not None:
        message, error_type, status_code = mapped
        structured_logger.warning(
            "Domain error",
            error_type=exc.__class__.__name__,
            domain_message=str(exc),
        )
        details = (
            {"error_code": exc.error_code} if isinstance(exc, AssistantError) else None
        )
        return _build_error_response(
            correlation_id=correlation_id,
            error_type=error_type,
            message=message,
            environment=environment,
            details=details,
            exception_type=exc.__class__.__name__,
            status_code=status_code,
        )

    # Generic fallback
    structured_logger.exception(
        "Unhandled exception", exception_type=exc.__class__.__name__, error=str(exc)
    )
    traceback_str: str | None = None
    if environment != "production":
        import traceback as _tb

        traceback_str = "".join(_tb.format_exception(exc)).strip()

    return _build_error_response(
        correlation_id=correlation_id,
        error_type="internal_server_error",
        message="An internal error occurred",
        environment=environment,
        traceback_str=traceback_str,
        exception_type=exc.__class__.__name__ if environment != "production" else None,
    )


def setup_logging() -> None:
    """Configure application logging with proper JSON structure and idempotent setup."""
    settings = get_settings()

    log_level = logging.DEBUG if settings.ENVIRONMENT == "development" else logging.INFO
    root_logger = logging.getLogger()

    # Make setup idempotent - avoid duplicate handlers
    if root_logger.handlers:
        return

    formatter: logging.Formatter
    if settings.ENVIRONMENT == "production":
        formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    # Quiet chatty client libraries outside development
    if settings.ENVIRONMENT != "development":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)
