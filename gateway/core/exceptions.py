"""Application exception classes and handlers."""

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Validation (400) ---


class ValidationError(AppException):
    """Request rejected before any upstream call."""

    def __init__(self, message: str = "Messages are required") -> None:
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


class ApiKeyRequiredError(ValidationError):
    """A non-default provider was selected without a caller API key."""

    def __init__(self, provider_label: str) -> None:
        super().__init__(message=f"{provider_label} API key is required")
        self.code = "API_KEY_REQUIRED"


# --- Upstream credentials (401) ---


class AuthError(AppException):
    """Upstream rejected the credentials (401/403)."""

    def __init__(
        self, message: str = "Invalid API key. Please check your settings."
    ) -> None:
        super().__init__(message=message, code="INVALID_API_KEY", status_code=401)


# --- Quota (402) ---


class QuotaError(AppException):
    """Upstream reported exhausted credits or billing limits."""

    def __init__(
        self, message: str = "Usage limit reached. Please add credits."
    ) -> None:
        super().__init__(message=message, code="QUOTA_EXCEEDED", status_code=402)


# --- Rate Limit (429) ---


class RateLimitError(AppException):
    """Upstream or local rate limit hit; the caller may retry later."""

    def __init__(
        self, message: str = "Rate limit exceeded. Please try again later."
    ) -> None:
        super().__init__(
            message=message, code="RATE_LIMIT_EXCEEDED", status_code=429
        )


# --- Server side (500) ---


class UpstreamError(AppException):
    """Any other upstream failure, carrying the upstream error text."""

    def __init__(self, detail: str, upstream_status: int | None = None) -> None:
        super().__init__(
            message=f"AI service error: {detail}",
            code="UPSTREAM_ERROR",
            status_code=500,
        )
        self.upstream_status = upstream_status


class ConfigurationError(AppException):
    """Server-side configuration is missing (e.g. built-in provider key)."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="CONFIGURATION_ERROR", status_code=500)


class ToolExecutionError(Exception):
    """A tool failed; caught by the executor and returned to the model as text."""


def classify_upstream_status(status_code: int, detail: str) -> AppException:
    """Map a non-2xx provider status to the error surfaced to the caller."""
    if status_code == 429:
        return RateLimitError()
    if status_code in (401, 403):
        return AuthError()
    if status_code == 402:
        return QuotaError()
    return UpstreamError(detail, upstream_status=status_code)


# --- Exception Handlers ---


def _error_body(message: str, code: str) -> dict[str, str]:
    return {"error": message, "code": code}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.code),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render body validation failures in the same shape as other errors."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid value')}".lstrip(": ")
    else:
        message = "Invalid request body"
    return JSONResponse(
        status_code=400,
        content=_error_body(message, "VALIDATION_ERROR"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback, never return it."""
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", "INTERNAL_ERROR"),
    )
