"""Service helpers for account profiles and user administration."""

from __future__ import annotations

import logging
from typing import Any

from bson import ObjectId
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import ConflictError
from app.core.errors import NotFoundError
from app.core.security import hash_password
from app.db.models.user import User as UserModel
from app.db.repository.users import delete_user
from app.db.repository.users import email_exists
from app.db.repository.users import get_user
from app.db.repository.users import list_users
from app.db.repository.users import update_user
from app.schemas.user import ProfileUpdate
from app.schemas.user import User
from app.services.auth import DUPLICATE_EMAIL

logger = logging.getLogger(__name__)

USER_HAS_RECORDS = "User still has products, reviews or orders."


def _serialize(user: UserModel) -> dict[str, Any]:
    return User.model_validate(user).to_json()


def _load_user(session: Session, user_id: ObjectId) -> UserModel:
    user = get_user(session, user_id)
    if user is None:
        raise NotFoundError("User")
    return user


def get_user_service(session: Session, user_id: ObjectId) -> dict[str, Any]:
    return _serialize(_load_user(session, user_id))


def list_users_service(session: Session) -> list[dict[str, Any]]:
    return [_serialize(user) for user in list_users(session)]


def update_user_service(
    session: Session,
    user_id: ObjectId,
    payload: ProfileUpdate,
    settings: Settings,
) -> dict[str, Any]:
    """Apply a partial update; a new password is hashed before it is stored."""
    user = _load_user(session, user_id)
    changes = payload.model_dump(exclude_none=True)

    email = changes.get("email")
    if email is not None and email != user.email and email_exists(session, email):
        raise ConflictError(DUPLICATE_EMAIL)
    if "password" in changes:
        changes["password"] = hash_password(changes["password"], rounds=settings.bcrypt_rounds)

    try:
        user = update_user(session, user, **changes)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(DUPLICATE_EMAIL) from None

    logger.info("Updated user %s", user.id)
    return _serialize(user)


def delete_user_service(session: Session, user_id: ObjectId) -> None:
    user = _load_user(session, user_id)
    try:
        delete_user(session, user)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(USER_HAS_RECORDS) from None
    logger.info("Deleted user %s", user_id)
