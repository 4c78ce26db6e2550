"""Success and error envelope builders bound to a per-request response context."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.schemas.error import ErrorDetail
from app.schemas.error import ErrorType
from app.schemas.error import ValidationErrorResponse


class ResponseAlreadySentError(RuntimeError):
    """Raised on a second terminal write for the same request."""


class ResponseContext:
    """Outgoing response state for one request.

    Tracks the explicit status and the headers collected by dependencies.
    Only ``send`` creates the response, and only once.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.status_explicit = False
        self.headers: dict[str, str] = {}
        self.response: JSONResponse | None = None

    @property
    def headers_sent(self) -> bool:
        return self.response is not None

    def status(self, status_code: int) -> ResponseContext:
        self.status_code = status_code
        self.status_explicit = True
        return self

    def send(self, status_code: int, content: Any) -> JSONResponse:
        if self.headers_sent:
            raise ResponseAlreadySentError("A response was already sent for this request")
        self.status(status_code)
        self.response = JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(content),
            headers=self.headers or None,
        )
        return self.response


def get_response_context(request: Request) -> ResponseContext:
    """Return the request's response context, creating it on first use."""
    context = getattr(request.state, "response_context", None)
    if context is None:
        context = ResponseContext()
        request.state.response_context = context
    return context


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_success_response_object(data: Any, meta: Any = None, success: bool = True) -> dict[str, Any]:
    return {"success": success, "data": data, "meta": meta}


def send_success_response(
    context: ResponseContext,
    *,
    status_code: int,
    data: Any,
    meta: Any = None,
    success: bool = True,
) -> JSONResponse:
    """Write ``{success, data, meta?}`` with ``status_code``."""
    payload = create_success_response_object(data, meta, success)
    if payload["meta"] is None:
        del payload["meta"]
    return context.send(status_code, payload)


def create_error_response_object(code: ErrorType, errors: list[dict[str, Any]]) -> dict[str, Any]:
    envelope = ValidationErrorResponse(
        code=code.value,
        timestamp=utc_timestamp(),
        errors=[ErrorDetail(**error) for error in errors],
    )
    return envelope.model_dump(exclude_none=True)


def send_error_response(
    context: ResponseContext,
    *,
    status_code: int,
    code: ErrorType,
    errors: list[dict[str, Any]],
) -> JSONResponse:
    """Write ``{success: false, code, timestamp, errors}`` with ``status_code``."""
    return context.send(status_code, create_error_response_object(code, errors))
