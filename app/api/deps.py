"""Request dependencies shared by the storefront routers.

Rate limiting, bearer-token authentication and the admin gate run as FastAPI
dependencies ahead of the endpoint. Every check raises a typed error; none of
them writes a response.
"""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
import hashlib
import logging

from fastapi import Depends
from fastapi import Header
from fastapi import Request
import jwt
from sqlalchemy.orm import Session

from app.cache.manager import CacheManager
from app.cache.rate_limit import rate_limit_headers
from app.core.config import RATE_LIMIT_CONFIG
from app.core.config import Settings
from app.core.errors import AuthenticationError
from app.core.errors import AuthorizationError
from app.core.handlers import async_handler
from app.core.responses import get_response_context
from app.core.result import Failure
from app.core.security import decode_access_token
from app.db.base import get_db_session
from app.db.models.user import User
from app.db.repository.users import get_user
from app.validation.validators import bearer_token_schema
from app.validation.validators import jwt_schema
from app.validation.validators import object_id_schema

logger = logging.getLogger(__name__)

NO_TOKEN = "Not authorized. No token."
INVALID_TOKEN_FORMAT = "Invalid token format."
NOT_AUTHORIZED = "Not authorized."
NOT_ADMIN = "Not authorized as an admin."


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(namespace: str) -> Callable[[Request], CacheManager]:
    """Dependency factory resolving one namespace of the application cache."""

    def dependency(request: Request) -> CacheManager:
        return request.app.state.caches[namespace]

    return dependency


def get_caches(request: Request) -> dict[str, CacheManager]:
    return request.app.state.caches


def rate_limit_key(request: Request) -> str:
    """Limiter key for the client and path; the path is hashed to keep the key short."""
    client_host = request.client.host if request.client else "unknown"
    path_digest = hashlib.sha256(request.url.path.encode("utf-8")).hexdigest()
    return f"{client_host}:{path_digest}"


def rate_limit(policy_name: str) -> Callable[[Request], Awaitable[None]]:
    """Dependency factory applying the named policy to the client and path.

    The dependency runs on the event loop; ``X-RateLimit-*`` headers are added
    to whatever response the request ends with.
    """
    policy = RATE_LIMIT_CONFIG[policy_name]

    @async_handler
    async def dependency(request: Request) -> None:
        limiter = request.app.state.rate_limiter
        count = limiter.hit(rate_limit_key(request), policy)
        if limiter.enabled:
            get_response_context(request).headers.update(rate_limit_headers(policy, count))

    return dependency


def extract_bearer_token(authorization: str | None) -> str:
    """Return the raw token from an ``Authorization`` header value."""
    if not authorization:
        raise AuthenticationError(NO_TOKEN)

    header = bearer_token_schema.safe_parse(authorization)
    if isinstance(header, Failure):
        raise AuthenticationError(INVALID_TOKEN_FORMAT)

    token = jwt_schema.safe_parse(header.data)
    if isinstance(token, Failure):
        raise AuthenticationError(NOT_AUTHORIZED)
    return token.data


@async_handler
def get_current_user(
    authorization: str | None = Header(default=None),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> User:
    """Resolve the signed-in user from the bearer token."""
    token = extract_bearer_token(authorization)
    try:
        claims = decode_access_token(token, secret=settings.jwt_secret)
    except jwt.PyJWTError as exc:
        logger.info("Rejected access token: %s", exc)
        raise AuthenticationError(NOT_AUTHORIZED) from None

    user_id = object_id_schema.safe_parse(claims.get("id"))
    if isinstance(user_id, Failure):
        raise AuthenticationError(NOT_AUTHORIZED)

    user = get_user(session, user_id.data)
    if user is None:
        raise AuthenticationError(NOT_AUTHORIZED)
    return user


@async_handler
def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise AuthorizationError(NOT_ADMIN, status_code=401)
    return user
