"""Pydantic schemas for account and session payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import model_validator

from app.schemas.base import CamelModel
from app.validation.validators import Email
from app.validation.validators import ObjectIdField
from app.validation.validators import Password
from app.validation.validators import required_text

NameText = required_text("Name is required.")


class SignupRequest(CamelModel):
    """Payload to register a new account."""

    name: NameText
    email: Email
    password: Password


class SigninRequest(CamelModel):
    """Payload to sign in with email and password."""

    email: Email
    password: Password


class User(CamelModel):
    """Public user payload; never carries the password hash."""

    id: ObjectIdField
    name: str
    email: str
    is_admin: bool
    created_at: datetime


class AuthenticatedUser(User):
    """User payload returned by signup/signin, with a fresh access token."""

    token: str


class ProfileUpdate(CamelModel):
    """Partial account update; empty-string fields are treated as omitted."""

    name: NameText | None = None
    email: Email | None = None
    password: Password | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_empty_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if value != ""}


class UserAdminUpdate(ProfileUpdate):
    """Partial account update made by an administrator."""

    is_admin: bool | None = None
