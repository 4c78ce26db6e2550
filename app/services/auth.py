"""Service helpers for signup, signin and access checks."""

from __future__ import annotations

import logging

from bson import ObjectId
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.errors import AuthorizationError
from app.core.errors import ConflictError
from app.core.security import generate_access_token
from app.core.security import hash_password
from app.db.models.user import User
from app.db.repository.users import create_user
from app.db.repository.users import email_exists
from app.db.repository.users import get_user_by_email
from app.schemas.user import AuthenticatedUser
from app.schemas.user import SigninRequest
from app.schemas.user import SignupRequest
from app.validation.schema import ValidationFailure
from app.validation.schema import ValidationIssue
from app.validation.validators import password_confirmation_schema

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."
DUPLICATE_EMAIL = "An account with this email already exists."


def issue_token(user: User, settings: Settings) -> str:
    return generate_access_token(
        {"id": str(user.id)},
        secret=settings.jwt_secret,
        expires_days=settings.jwt_expires_days,
    )


def _authenticated(user: User, settings: Settings) -> dict:
    payload = AuthenticatedUser.model_validate(
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "is_admin": user.is_admin,
            "created_at": user.created_at,
            "token": issue_token(user, settings),
        }
    )
    return payload.to_json()


def signup_service(session: Session, payload: SignupRequest, settings: Settings) -> dict:
    """Register a customer account and return it with an access token."""
    if email_exists(session, payload.email):
        raise ConflictError(DUPLICATE_EMAIL)

    try:
        user = create_user(
            session,
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password, rounds=settings.bcrypt_rounds),
        )
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(DUPLICATE_EMAIL) from None

    logger.info("Created user %s", user.id)
    return _authenticated(user, settings)


async def signin_service(session: Session, payload: SigninRequest, settings: Settings) -> dict:
    """Check credentials; unknown emails and wrong passwords fail identically."""
    user = await run_in_threadpool(get_user_by_email, session, payload.email)
    if user is None:
        raise ValidationFailure([ValidationIssue(path=(), message=INVALID_CREDENTIALS, code="password_mismatch")])

    await password_confirmation_schema.parse_async({"request": payload.password, "encrypted": user.password})
    return _authenticated(user, settings)


def ensure_owner_or_admin(user: User, owner_id: ObjectId, resource: str) -> None:
    """Raise 403 unless ``user`` owns the resource or is an administrator."""
    if user.is_admin or user.id == owner_id:
        return
    raise AuthorizationError(f"Not authorized to access this {resource}.")
