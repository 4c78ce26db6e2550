"""Repository primitives for user accounts."""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.user import User

UPDATABLE_FIELDS = ("name", "email", "password", "is_admin")


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password_hash: str,
    is_admin: bool = False,
) -> User:
    """Create and return a user row."""
    user = User(name=name, email=email, password=password_hash, is_admin=is_admin)
    session.add(user)
    session.flush()
    session.refresh(user)
    return user


def get_user(session: Session, user_id: ObjectId) -> User | None:
    """Fetch a user by id."""
    return session.get(User, user_id)


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.scalars(select(User).where(User.email == email)).first()


def email_exists(session: Session, email: str) -> bool:
    stmt = select(User.id).where(User.email == email).limit(1)
    return session.scalars(stmt).first() is not None


def list_users(session: Session) -> list[User]:
    """Return every account, oldest first."""
    return list(session.scalars(select(User).order_by(User.created_at, User.id)))


def update_user(session: Session, user: User, **changes: Any) -> User:
    """Apply non-``None`` changes to mutable account fields."""
    for field_name in UPDATABLE_FIELDS:
        value = changes.get(field_name)
        if value is not None:
            setattr(user, field_name, value)

    session.flush()
    session.refresh(user)
    return user


def delete_user(session: Session, user: User) -> None:
    session.delete(user)
    session.flush()
