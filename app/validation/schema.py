"""Declarative schemas with async refinements and structured validation issues.

A ``Schema`` wraps any pydantic-compatible type (a model, or an ``Annotated``
validator from ``app.validation.validators``) and adds cross-field
refinements that may be synchronous or awaitable. Structural validation always
runs first; refinements only run against a value that already parsed, and every
failing refinement is reported, not just the first one.

Failures are surfaced as ``ValidationFailure`` carrying ordered
``ValidationIssue`` entries, which the error handlers turn into the validated
error envelope.
"""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
import inspect
from typing import Any
from typing import Generic
from typing import TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.result import Failure
from app.core.result import Result
from app.core.result import Success

T = TypeVar("T")

PathPart = str | int

_REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})
_CONTEXT_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class ValidationIssue:
    """One structured validation failure."""

    path: tuple[PathPart, ...]
    message: str
    code: str = "custom"
    context: dict[str, Any] = field(default_factory=dict)


class ValidationFailure(Exception):
    """Raised when a schema rejects its input; carries every collected issue."""

    def __init__(self, issues: Iterable[ValidationIssue]) -> None:
        self.issues = list(issues)
        super().__init__(format_issues(self.issues))

    @classmethod
    def from_pydantic(
        cls,
        exc: PydanticValidationError,
        *,
        strip_request_location: bool = False,
    ) -> ValidationFailure:
        return cls(issues_from_errors(exc.errors(), strip_request_location=strip_request_location))


def _clean_context(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    return {key: value for key, value in raw.items() if isinstance(value, _CONTEXT_TYPES)}


def issues_from_errors(
    errors: Sequence[dict[str, Any]],
    *,
    strip_request_location: bool = False,
) -> list[ValidationIssue]:
    """Convert pydantic error dicts into validation issues, preserving order."""
    issues: list[ValidationIssue] = []
    for error in errors:
        location = tuple(error.get("loc", ()))
        if strip_request_location and location and location[0] in _REQUEST_LOCATIONS:
            location = location[1:]
        issues.append(
            ValidationIssue(
                path=location,
                message=str(error.get("msg", "Invalid value")),
                code=str(error.get("type", "custom")),
                context=_clean_context(error.get("ctx")),
            )
        )
    return issues


def _join_path(path: Sequence[PathPart]) -> str:
    return ".".join(str(part) for part in path)


def format_issues(issues: Iterable[ValidationIssue]) -> str:
    """Render issues as one display string: ``"msg; a.b msg"``."""
    rendered = []
    for issue in issues:
        if not issue.path:
            rendered.append(issue.message)
        else:
            rendered.append(f"{_join_path(issue.path)} {issue.message}")
    return "; ".join(rendered)


def issue_details(issues: Iterable[ValidationIssue]) -> list[dict[str, Any]]:
    """Render issues as ``{path, message, ...}`` detail objects for API responses."""
    details: list[dict[str, Any]] = []
    for issue in issues:
        detail: dict[str, Any] = {}
        if issue.path:
            detail["path"] = _join_path(issue.path)
        detail["message"] = issue.message
        detail.update(issue.context)
        details.append(detail)
    return details


@dataclass(frozen=True)
class Refinement:
    """Check run against an already-parsed value."""

    check: Callable[[Any], bool | Awaitable[bool]]
    message: str
    code: str = "custom"
    path: tuple[PathPart, ...] = ()

    def issue(self) -> ValidationIssue:
        return ValidationIssue(path=self.path, message=self.message, code=self.code)


class Schema(Generic[T]):
    """Composable parser for untrusted input."""

    def __init__(self, type_: Any, *, refinements: Sequence[Refinement] = ()) -> None:
        self._type = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)
        self._refinements = tuple(refinements)

    def refine(
        self,
        check: Callable[[T], bool | Awaitable[bool]],
        message: str,
        *,
        code: str = "custom",
        path: Sequence[PathPart] = (),
    ) -> Schema[T]:
        """Return a new schema with an extra refinement appended."""
        refinement = Refinement(check=check, message=message, code=code, path=tuple(path))
        return Schema(self._type, refinements=(*self._refinements, refinement))

    def _validate(self, value: Any) -> T:
        try:
            return self._adapter.validate_python(value)
        except PydanticValidationError as exc:
            raise ValidationFailure.from_pydantic(exc) from exc

    def parse(self, value: Any) -> T:
        parsed = self._validate(value)
        issues: list[ValidationIssue] = []
        for refinement in self._refinements:
            outcome = refinement.check(parsed)
            if inspect.isawaitable(outcome):
                if inspect.iscoroutine(outcome):
                    outcome.close()
                raise TypeError("Schema has an async refinement; use parse_async()")
            if not outcome:
                issues.append(refinement.issue())
        if issues:
            raise ValidationFailure(issues)
        return parsed

    async def parse_async(self, value: Any) -> T:
        parsed = self._validate(value)
        issues: list[ValidationIssue] = []
        for refinement in self._refinements:
            outcome = refinement.check(parsed)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if not outcome:
                issues.append(refinement.issue())
        if issues:
            raise ValidationFailure(issues)
        return parsed

    def safe_parse(self, value: Any) -> Result[T, ValidationFailure]:
        try:
            return Success(self.parse(value))
        except ValidationFailure as failure:
            return Failure(failure)

    async def safe_parse_async(self, value: Any) -> Result[T, ValidationFailure]:
        try:
            return Success(await self.parse_async(value))
        except ValidationFailure as failure:
            return Failure(failure)
