"""API error types and the centralized exception handlers.

Every failure reaches the client through one of the handlers registered by
``register_error_handlers``; no other component writes an error response.

* ``ValidationFailure`` and FastAPI's ``RequestValidationError`` produce the
  validated envelope ``{success, code, timestamp, errors}``.
* ``APIError`` subclasses produce ``{message, code, timestamp, path, details?}``
  at the status code they carry.
* Anything else (forwarded by ``async_handler``, unmatched routes, stray HTTP
  exceptions) produces ``{message, stack?}``.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.responses import get_response_context
from app.core.responses import send_error_response
from app.core.responses import utc_timestamp
from app.schemas.error import ErrorResponse
from app.schemas.error import ErrorType
from app.schemas.error import GeneralErrorResponse
from app.validation.schema import ValidationFailure
from app.validation.schema import issue_details
from app.validation.schema import issues_from_errors

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base application exception carrying its own status code and error type."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = ErrorType.INTERNAL
    default_message = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: ErrorType | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        self.code = code or self.default_code
        self.details = details
        self.headers = headers
        super().__init__(self.message)


class ValidationError(APIError):
    default_status_code = status.HTTP_400_BAD_REQUEST
    default_code = ErrorType.VALIDATION
    default_message = "Validation failed"


class BadRequestError(APIError):
    default_status_code = status.HTTP_400_BAD_REQUEST
    default_code = ErrorType.BAD_REQUEST
    default_message = "Bad request"


class AuthenticationError(APIError):
    default_status_code = status.HTTP_401_UNAUTHORIZED
    default_code = ErrorType.AUTHENTICATION
    default_message = "Authentication required"


class AuthorizationError(APIError):
    default_status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorType.AUTHORIZATION
    default_message = "Insufficient permissions"


class NotFoundError(APIError):
    """Missing resource; the message is built from the resource name."""

    default_status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorType.NOT_FOUND

    def __init__(self, resource: str = "Resource", **kwargs: Any) -> None:
        super().__init__(f"{resource} not found", **kwargs)


class ConflictError(APIError):
    default_status_code = status.HTTP_409_CONFLICT
    default_code = ErrorType.CONFLICT
    default_message = "Conflict"


class RateLimitError(APIError):
    default_status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = ErrorType.RATE_LIMIT
    default_message = "Too many requests"


class DatabaseError(APIError):
    default_code = ErrorType.DATABASE_ERROR
    default_message = "Database operation failed"


class InternalError(APIError):
    pass


class EmptyCartError(APIError):
    default_status_code = status.HTTP_400_BAD_REQUEST
    default_code = ErrorType.EMPTY_CART
    default_message = "No order items"


class ForwardedError(Exception):
    """Unclassified failure routed to the general error handler."""

    def __init__(self, original: BaseException, *, status_code: int | None = None) -> None:
        self.original = original
        self.status_code = status_code
        super().__init__(str(original))


def _already_sent(request: Request) -> JSONResponse | None:
    context = get_response_context(request)
    if context.headers_sent:
        logger.warning(
            "Dropping error response for %s: a response was already sent",
            request.url.path,
        )
        return context.response
    return None


def _send(request: Request, status_code: int, content: dict[str, Any]) -> JSONResponse:
    sent = _already_sent(request)
    if sent is not None:
        return sent
    return get_response_context(request).send(status_code, content)


def _original_url(request: Request) -> str:
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


def _expose_stack(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return settings.expose_error_stack


def _resolve_status(request: Request, status_code: int | None) -> int:
    if status_code is not None:
        return status_code
    context = get_response_context(request)
    if context.status_explicit and context.status_code >= status.HTTP_400_BAD_REQUEST:
        return context.status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_error(request: Request, exc: BaseException, *, status_code: int | None = None) -> JSONResponse:
    """Terminal handler: send ``{message, stack?}`` for an unclassified error."""
    resolved = _resolve_status(request, status_code)
    if resolved >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
            exc_info=(type(exc), exc, exc.__traceback__),
        )

    stack = None
    if _expose_stack(request):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    payload = GeneralErrorResponse(message=str(exc), stack=stack)
    return _send(request, resolved, payload.model_dump(exclude_none=True))


async def validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    """Send schema failures in the validated envelope."""
    logger.info("Validation failed on %s: %s", request.url.path, exc)
    sent = _already_sent(request)
    if sent is not None:
        return sent
    return send_error_response(
        get_response_context(request),
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ErrorType.VALIDATION,
        errors=issue_details(exc.issues),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to the validated envelope."""
    failure = ValidationFailure(issues_from_errors(exc.errors(), strip_request_location=True))
    return await validation_failure_handler(request, failure)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Return typed application errors in the shared envelope."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("%s on %s: %s", exc.code.value, request.url.path, exc.message)

    payload = ErrorResponse(
        message=exc.message,
        code=exc.code.value,
        timestamp=utc_timestamp(),
        path=request.url.path,
        details=exc.details,
    )
    if exc.headers:
        get_response_context(request).headers.update(exc.headers)
    return _send(request, exc.status_code, payload.model_dump(exclude_none=True))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Route misses become ``Not Found: <url>``; other HTTP errors keep their detail."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return handle_error(
            request,
            LookupError(f"Not Found: {_original_url(request)}"),
            status_code=status.HTTP_404_NOT_FOUND,
        )

    message = str(exc.detail) if exc.detail else "Request failed"
    return handle_error(request, RuntimeError(message), status_code=exc.status_code)


async def forwarded_error_handler(request: Request, exc: ForwardedError) -> JSONResponse:
    return handle_error(request, exc.original, status_code=exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last line of defense for errors that bypassed ``async_handler``."""
    return handle_error(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    """Attach all storefront error handlers to a FastAPI app instance."""

    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(ForwardedError, forwarded_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
