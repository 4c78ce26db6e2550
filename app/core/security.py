"""Password hashing and access-token primitives."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone
from typing import Any

import bcrypt
import jwt
from starlette.concurrency import run_in_threadpool

JWT_ALGORITHM = "HS256"
# bcrypt only reads the first 72 bytes of a secret.
BCRYPT_MAX_BYTES = 72


def _encode_secret(value: str) -> bytes:
    return value.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: int) -> str:
    """Return a bcrypt hash of ``password``."""
    return bcrypt.hashpw(_encode_secret(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, hashed: str) -> bool:
    """Compare a plaintext password with a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode_secret(password), hashed.encode("utf-8"))
    except ValueError:
        return False


async def verify_password(password: str, hashed: str) -> bool:
    """Async variant of ``check_password`` that keeps the event loop free."""
    return await run_in_threadpool(check_password, password, hashed)


def generate_access_token(
    claims: dict[str, Any],
    *,
    secret: str,
    expires_days: int,
    now: datetime | None = None,
) -> str:
    """Sign ``claims`` into an HS256 token with ``iat``/``exp`` set."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(days=expires_days)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, *, secret: str) -> dict[str, Any]:
    """Verify signature and expiry; raises ``jwt.PyJWTError`` subclasses on failure."""
    return jwt.decode(
        token,
        secret,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["iat", "exp"]},
    )
