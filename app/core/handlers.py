"""Wrapper that routes every endpoint/dependency failure to the error handlers."""

from __future__ import annotations

from collections.abc import Callable
import functools
import inspect
from typing import Any
from typing import TypeVar

from fastapi.exceptions import RequestValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import APIError
from app.core.errors import ForwardedError
from app.validation.schema import ValidationFailure

F = TypeVar("F", bound=Callable[..., Any])

_PASSTHROUGH_ERRORS = (
    APIError,
    ValidationFailure,
    ForwardedError,
    RequestValidationError,
    StarletteHTTPException,
)


def async_handler(func: F) -> F:
    """Wrap a sync or async handler so unclassified exceptions become ``ForwardedError``.

    Sync callables run in the thread pool. The wrapper exposes the wrapped
    callable's resolved signature, so FastAPI still injects its parameters.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            if inspect.iscoroutinefunction(func):
                return await func(*args, **kwargs)
            return await run_in_threadpool(func, *args, **kwargs)
        except _PASSTHROUGH_ERRORS:
            raise
        except Exception as exc:
            raise ForwardedError(exc) from exc

    wrapper.__signature__ = inspect.signature(func, eval_str=True)  # type: ignore[attr-defined]
    return wrapper  # type: ignore[return-value]
