"""FastAPI application entrypoint for the storefront API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.auth import router as auth_router
from app.api.cache import router as cache_router
from app.api.orders import router as orders_router
from app.api.products import router as products_router
from app.api.reviews import router as reviews_router
from app.api.uploads import router as uploads_router
from app.api.users import router as users_router
from app.cache.manager import CacheManager
from app.cache.manager import build_caches
from app.cache.rate_limit import RateLimiter
from app.core.config import Settings
from app.core.config import get_settings
from app.core.errors import register_error_handlers
from app.db.base import create_tables
from app.services.uploads import UPLOADS_URL_PREFIX
from app.services.uploads import ImageStorage
from app.services.uploads import LocalImageStorage

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    caches: dict[str, CacheManager] | None = None,
    image_storage: ImageStorage | None = None,
) -> FastAPI:
    """Build an application with its own cache, rate limiter and image storage."""
    settings = settings or get_settings()
    caches = caches if caches is not None else build_caches()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
        if settings.auto_create_tables:
            create_tables()
        yield

    app = FastAPI(title="Storefront API", lifespan=lifespan)
    app.state.settings = settings
    app.state.caches = caches
    app.state.rate_limiter = RateLimiter(caches["rate-limit"], enabled=settings.rate_limit_enabled)
    app.state.image_storage = image_storage or LocalImageStorage(settings.upload_dir)

    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(products_router)
    app.include_router(reviews_router)
    app.include_router(orders_router)
    app.include_router(uploads_router)
    app.include_router(cache_router)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    logger.info("Storefront API configured: %s", settings.safe_for_logging())
    return app


app = create_app()
