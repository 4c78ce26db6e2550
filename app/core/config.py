"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_ENVIRONMENT = "development"
DEFAULT_JWT_SECRET = "change-me"
DEFAULT_JWT_EXPIRES_DAYS = 30
DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_UPLOAD_DIR = "uploads"

IMAGE_FIELD_NAME = "image"
IMAGE_SIZE_LIMIT = 5 * 1024 * 1024
IMAGE_TYPE_LIMIT = (
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/avif",
)

PRODUCTS_PER_PAGE = 10
TOP_RATED_PRODUCTS_LIMIT = 3

CACHE_NAMESPACES = ("product", "user", "order", "rate-limit")


@dataclass(frozen=True)
class CacheConfig:
    """Per-namespace cache limits; durations are in seconds."""

    std_ttl: int = 30 * 24 * 60 * 60
    check_period: int = 24 * 60 * 60
    max_keys: int = 1000


DEFAULT_CACHE_CONFIG = CacheConfig()


@dataclass(frozen=True)
class RateLimitPolicy:
    """Fixed-window request budget for one route class."""

    window_ms: int
    max_requests: int
    message: str


RATE_LIMIT_CONFIG: dict[str, RateLimitPolicy] = {
    "DEFAULT": RateLimitPolicy(
        window_ms=15 * 60 * 1000,
        max_requests=100,
        message="Too many requests, please try again later.",
    ),
    "STRICT": RateLimitPolicy(
        window_ms=60 * 1000,
        max_requests=4,
        message="Rate limit exceeded. Slow down.",
    ),
    "ADMIN": RateLimitPolicy(
        window_ms=5 * 60 * 1000,
        max_requests=50,
        message="Admin rate limit exceeded.",
    ),
    "AUTH": RateLimitPolicy(
        window_ms=15 * 60 * 1000,
        max_requests=10,
        message="Too many authentication attempts. Please try again later.",
    ),
}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def redact_secret(secret: str) -> str:
    """Return a non-recoverable placeholder for sensitive values."""
    if not secret:
        return "<empty>"
    return "<redacted>"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the storefront API."""

    environment: str = DEFAULT_ENVIRONMENT
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_expires_days: int = DEFAULT_JWT_EXPIRES_DAYS
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    expose_error_stack: bool = False
    upload_dir: str = DEFAULT_UPLOAD_DIR
    rate_limit_enabled: bool = True
    auto_create_tables: bool = False

    def safe_for_logging(self) -> dict[str, str | int | bool]:
        """Return settings safe for logs."""
        return {
            "environment": self.environment,
            "jwt_secret": redact_secret(self.jwt_secret),
            "jwt_expires_days": self.jwt_expires_days,
            "bcrypt_rounds": self.bcrypt_rounds,
            "expose_error_stack": self.expose_error_stack,
            "upload_dir": self.upload_dir,
            "rate_limit_enabled": self.rate_limit_enabled,
            "auto_create_tables": self.auto_create_tables,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load application settings from the environment."""
    environment = os.getenv("STOREFRONT_ENV", DEFAULT_ENVIRONMENT)
    return Settings(
        environment=environment,
        jwt_secret=os.getenv("STOREFRONT_JWT_SECRET", DEFAULT_JWT_SECRET),
        jwt_expires_days=_get_int_env("STOREFRONT_JWT_EXPIRES_DAYS", DEFAULT_JWT_EXPIRES_DAYS),
        bcrypt_rounds=_get_int_env("STOREFRONT_BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
        expose_error_stack=_get_bool_env(
            "STOREFRONT_EXPOSE_ERROR_STACK",
            environment == "development",
        ),
        upload_dir=os.getenv("STOREFRONT_UPLOAD_DIR", DEFAULT_UPLOAD_DIR),
        rate_limit_enabled=_get_bool_env("STOREFRONT_RATE_LIMIT_ENABLED", True),
        auto_create_tables=_get_bool_env("STOREFRONT_AUTO_CREATE_TABLES", False),
    )
