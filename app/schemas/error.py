"""Error envelope schemas shared across API handlers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict


class ErrorType(str, Enum):
    """Error classes exposed as the envelope `code`."""

    VALIDATION = "VALIDATION"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"
    BAD_REQUEST = "BAD_REQUEST"
    RATE_LIMIT = "RATE_LIMIT"
    DATABASE_ERROR = "DATABASE_ERROR"
    EMPTY_CART = "EMPTY_CART"


class ErrorDetail(BaseModel):
    """Single field-level validation issue; validator metadata rides along as extras."""

    model_config = ConfigDict(extra="allow")

    path: str | None = None
    message: str


class ValidationErrorResponse(BaseModel):
    """Envelope for rejected input: ``{success, code, timestamp, errors}``."""

    success: bool = False
    code: str
    timestamp: str
    errors: list[ErrorDetail]


class ErrorResponse(BaseModel):
    """Envelope for typed application errors."""

    message: str
    code: str
    timestamp: str
    path: str
    details: dict[str, Any] | None = None


class GeneralErrorResponse(BaseModel):
    """Envelope for unclassified failures; ``stack`` only in debug deployments."""

    message: str
    stack: str | None = None
